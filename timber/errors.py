from typing import Optional


class TimberError(Exception):
    """Base class for errors raised by the Timber client."""


class SyncError(TimberError):
    """A batch could not be delivered after all retry attempts."""

    def __init__(self, batch_size: int, cause: Optional[BaseException] = None):
        self.batch_size = batch_size
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to sync {batch_size} log(s){detail}")
