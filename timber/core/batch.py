import threading
from typing import Callable, List, Optional

from timber.types import LogEntry


class Batcher:
    """Accumulates entries and hands them off in batches.

    A batch is dispatched when it reaches ``size`` entries, or ``interval``
    seconds after its first entry arrived, whichever happens first.
    ``dispatch`` runs while the buffer lock is held, so it must only queue
    the batch (the client submits it to its delivery pool). That way a
    drained batch is always visible to whoever flushes next.
    """

    def __init__(self, dispatch: Callable[[List[LogEntry]], None], size: int, interval: float):
        self.dispatch = dispatch
        self.size = max(1, int(size))
        self.interval = max(0.0, float(interval))
        self._lock = threading.Lock()
        self._buffer: List[LogEntry] = []
        self._timer: Optional[threading.Timer] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def add(self, entry: LogEntry) -> None:
        with self._lock:
            self._buffer.append(entry)
            if len(self._buffer) >= self.size:
                self._dispatch_locked()
            elif self._timer is None:
                self._start_timer_locked()

    def flush(self) -> None:
        """Dispatch whatever is buffered right now."""
        with self._lock:
            self._dispatch_locked()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _start_timer_locked(self) -> None:
        timer = threading.Timer(self.interval, self._on_timer)
        timer.args = (timer,)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _on_timer(self, timer: threading.Timer) -> None:
        with self._lock:
            # A timer that fired while a size-triggered dispatch held the lock is stale
            if self._timer is not timer:
                return
            self._dispatch_locked()

    def _dispatch_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # add() dispatches at `size`, so the buffer never holds more than one batch
        batch, self._buffer = self._buffer, []
        if batch:
            self.dispatch(batch)
