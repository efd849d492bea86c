"""Integration with the standard library ``logging`` module."""

from timber.logging.handler import TimberHandler

__all__ = ["TimberHandler"]
