"""Timber logging SDK: a batching client plus FastAPI and stdlib logging adapters."""

from timber.client import Timber
from timber.errors import SyncError, TimberError
from timber.types import LogEntry, LogLevel

__all__ = [
    "Timber",
    "LogEntry",
    "LogLevel",
    "SyncError",
    "TimberError",
]
