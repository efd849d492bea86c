from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def from_label(cls, label: Any) -> "LogLevel":
        """Normalize a free-form severity label; unknown labels become INFO."""
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            return cls.INFO
        return _LABELS.get(label.strip().lower(), cls.INFO)


_LABELS: Dict[str, LogLevel] = {
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warn": LogLevel.WARN,
    "warning": LogLevel.WARN,
    "error": LogLevel.ERROR,
    # stdlib `logging` ships these above ERROR
    "critical": LogLevel.ERROR,
    "fatal": LogLevel.ERROR,
}

# Declared fields; metadata may not shadow them
RESERVED_KEYS = frozenset({"dt", "level", "message"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    dt: datetime = Field(default_factory=_utcnow)
    level: LogLevel = LogLevel.INFO
    message: str

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    def __getitem__(self, key: str) -> Any:
        if key in RESERVED_KEYS:
            return getattr(self, key)
        extra = self.model_extra or {}
        if key not in extra:
            raise KeyError(key)
        return extra[key]

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape: ISO timestamp, string level, metadata flattened."""
        payload: Dict[str, Any] = dict(self.model_extra or {})
        payload["dt"] = self.dt.isoformat()
        payload["level"] = self.level.value
        payload["message"] = self.message
        return payload
