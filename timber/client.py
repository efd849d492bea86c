"""Timber client: the sink both adapters forward entries to.

Entries are batched in memory and delivered on a small thread pool, so
``log()`` never waits on the network. The delivery step is a plain callable
(``set_sync``) which defaults to :class:`timber.transport.http.HTTPSync`.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from timber.config import settings
from timber.core.batch import Batcher
from timber.errors import SyncError
from timber.infrastructure.resilience import RetryPolicy
from timber.obs.logger import log_event
from timber.transport.http import HTTPSync
from timber.types import RESERVED_KEYS, LogEntry, LogLevel


SyncFn = Callable[[List[LogEntry]], Optional[List[LogEntry]]]
Middleware = Callable[[LogEntry], Optional[LogEntry]]


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


def clean_metadata(metadata: Optional[Mapping[Any, Any]]) -> Dict[str, Any]:
    """Keep only string keys that do not shadow the entry's own fields."""
    if not metadata or not isinstance(metadata, Mapping):
        return {}
    return {
        k: v
        for k, v in metadata.items()
        if isinstance(k, str) and not k.startswith("_") and k not in RESERVED_KEYS
    }


class Timber:
    def __init__(
        self,
        api_key: Optional[str] = None,
        source_id: Optional[str] = None,
        *,
        endpoint: Optional[str] = None,
        batch_size: Optional[int] = None,
        batch_interval: Optional[float] = None,
        sync_max: Optional[int] = None,
        retry_count: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        ignore_exceptions: Optional[bool] = None,
        sync: Optional[SyncFn] = None,
    ):
        self.api_key = _pick(api_key, settings.TIMBER_API_KEY)
        self.source_id = _pick(source_id, settings.TIMBER_SOURCE_ID)
        self.endpoint = _pick(endpoint, settings.TIMBER_ENDPOINT)
        self.batch_size = _pick(batch_size, settings.TIMBER_BATCH_SIZE)
        self.batch_interval = _pick(batch_interval, settings.TIMBER_BATCH_INTERVAL)
        self.sync_max = max(1, _pick(sync_max, settings.TIMBER_SYNC_MAX))
        self.ignore_exceptions = _pick(ignore_exceptions, settings.TIMBER_IGNORE_EXCEPTIONS)
        self.retry_policy = RetryPolicy(
            retries=_pick(retry_count, settings.TIMBER_RETRY_COUNT),
            backoff=_pick(retry_backoff, settings.TIMBER_RETRY_BACKOFF),
        )

        self._lock = threading.Lock()
        self._logged = 0
        self._synced = 0
        self._closed = False
        self._middleware: List[Middleware] = []
        self._pending: Set[Future] = set()
        self._errors: List[SyncError] = []

        self._transport: Optional[HTTPSync] = None
        if sync is None:
            self._transport = HTTPSync(self.api_key, self.source_id, endpoint=self.endpoint)
            sync = self._transport
        self._sync: SyncFn = sync

        self._executor = ThreadPoolExecutor(max_workers=self.sync_max, thread_name_prefix="timber-sync")
        self._batcher = Batcher(self._dispatch, size=self.batch_size, interval=self.batch_interval)

    # -- counters -----------------------------------------------------------

    @property
    def logged(self) -> int:
        """Number of entries accepted by `log()` or `enqueue()`."""
        return self._logged

    @property
    def synced(self) -> int:
        """Number of entries successfully delivered."""
        return self._synced

    # -- configuration ------------------------------------------------------

    def set_sync(self, fn: SyncFn) -> None:
        """Replace the delivery step. `fn` receives a batch and returns it."""
        self._sync = fn

    def use(self, fn: Middleware) -> None:
        """Add an entry middleware; returning None from it drops the entry."""
        self._middleware.append(fn)

    def remove(self, fn: Middleware) -> None:
        self._middleware = [m for m in self._middleware if m is not fn]

    # -- logging ------------------------------------------------------------

    def log(
        self,
        message: Any,
        level: Any = LogLevel.INFO,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Optional[LogEntry]:
        with self._lock:
            closed = self._closed
        if closed:
            log_event("log_after_close", level="WARNING", source_id=self.source_id)
            return None

        fields = clean_metadata(metadata)
        fields["message"] = message if isinstance(message, str) else str(message)
        fields["level"] = LogLevel.from_label(level)
        entry: Optional[LogEntry] = LogEntry.model_validate(fields)

        for fn in list(self._middleware):
            entry = fn(entry)
            if entry is None:
                return None

        if not self._accept(entry):
            return None
        return entry

    def debug(self, message: Any, metadata: Optional[Mapping[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(message, LogLevel.DEBUG, metadata)

    def info(self, message: Any, metadata: Optional[Mapping[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(message, LogLevel.INFO, metadata)

    def warn(self, message: Any, metadata: Optional[Mapping[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(message, LogLevel.WARN, metadata)

    warning = warn

    def error(self, message: Any, metadata: Optional[Mapping[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(message, LogLevel.ERROR, metadata)

    def enqueue(self, entry: LogEntry) -> None:
        """Take ownership of one entry; delivery happens later, in a batch."""
        self._accept(entry)

    def _accept(self, entry: LogEntry) -> bool:
        with self._lock:
            accepted = not self._closed
            if accepted:
                self._logged += 1
        if not accepted:
            log_event("enqueue_after_close", level="WARNING", source_id=self.source_id)
            return False
        self._batcher.add(entry)
        return True

    # -- delivery -----------------------------------------------------------

    def _dispatch(self, batch: List[LogEntry]) -> None:
        try:
            future = self._executor.submit(self._deliver, batch)
        except RuntimeError as e:
            # Pool already shut down by close()
            log_event(
                "batch_dropped",
                level="WARNING",
                batch_size=len(batch),
                error=str(e),
                source_id=self.source_id,
            )
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _on_retry(self, attempt: int, error: BaseException) -> None:
        log_event(
            "sync_retry",
            level="WARNING",
            attempt=attempt,
            error=str(error),
            source_id=self.source_id,
        )

    def _deliver(self, batch: List[LogEntry]) -> List[LogEntry]:
        try:
            result = self.retry_policy.call(self._sync, batch, on_retry=self._on_retry)
        except Exception as e:
            log_event(
                "sync_failed",
                level="ERROR",
                batch_size=len(batch),
                error=str(e),
                source_id=self.source_id,
            )
            if self.ignore_exceptions:
                return []
            error = SyncError(len(batch), e)
            with self._lock:
                self._errors.append(error)
            raise error from e

        delivered = batch if result is None else result
        with self._lock:
            self._synced += len(delivered)
        return delivered

    def flush(self, timeout: Optional[float] = None) -> None:
        """Dispatch buffered entries and wait for every in-flight delivery."""
        self._batcher.flush()
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)
        with self._lock:
            errors, self._errors = self._errors, []
        if errors:
            raise errors[0]

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self.flush()
        finally:
            self._batcher.cancel()
            self._executor.shutdown(wait=True)
            if self._transport is not None:
                self._transport.close()

    def __enter__(self) -> "Timber":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
