import time
from typing import Callable, Any, Optional, Tuple, Type


class RetryPolicy:
    def __init__(
        self,
        retries: int = 3,
        backoff: float = 0.5,
        max_backoff: float = 30.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.retries = max(0, int(retries))
        self.backoff = max(0.0, float(backoff))
        self.max_backoff = max_backoff
        self.retry_on = retry_on
        self.sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number `attempt` (1-based), doubling each time."""
        return min(self.backoff * (2 ** (attempt - 1)), self.max_backoff)

    def call(
        self,
        func: Callable,
        *args,
        on_retry: Optional[Callable[[int, BaseException], None]] = None,
        **kwargs
    ) -> Any:
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except self.retry_on as e:
                attempt += 1
                if attempt > self.retries:
                    raise e
                if on_retry is not None:
                    on_retry(attempt, e)
                delay = self.delay_for(attempt)
                if delay > 0:
                    self.sleep(delay)

