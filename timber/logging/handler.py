"""``logging.Handler`` that forwards each record to a Timber client.

Attach it to any logger::

    logger.addHandler(TimberHandler(timber, level=logging.INFO,
                                    default_metadata={"component": "server"}))

or declare it with ``logging.config.dictConfig``::

    "handlers": {
        "timber": {
            "()": "timber.logging.handler.TimberHandler",
            "timber": "ext://myapp.timber",
            "default_metadata": {"component": "server"},
        }
    }

Fields passed through ``extra=`` become metadata on the entry, overriding
``default_metadata`` on key collision.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from timber.client import Timber
from timber.errors import TimberError
from timber.obs.context import request_id_var
from timber.obs.logger import log_event
from timber.types import LogLevel


# Attributes every LogRecord carries; anything else arrived through `extra=`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class TimberHandler(logging.Handler):
    def __init__(
        self,
        timber: Timber,
        level: int = logging.NOTSET,
        default_metadata: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(level=level)
        self.timber = timber
        self.default_metadata: Dict[str, Any] = dict(default_metadata or {})

    def record_metadata(self, record: logging.LogRecord) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"logger": record.name}
        metadata.update(self.default_metadata)
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                metadata[key] = value
        if record.exc_info:
            metadata["exception"] = self.formatException(record.exc_info)
        request_id = request_id_var.get()
        if request_id is not None:
            metadata.setdefault("request_id", request_id)
        return metadata

    def formatException(self, exc_info) -> str:
        return (self.formatter or logging.Formatter()).formatException(exc_info)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.timber.log(
                record.getMessage(),
                LogLevel.from_label(record.levelname),
                self.record_metadata(record),
            )
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        # Called by logging.shutdown() at exit; must not raise
        try:
            self.timber.flush()
        except TimberError as e:
            log_event("handler_flush_failed", level="ERROR", handler=self.get_name(), error=str(e))
