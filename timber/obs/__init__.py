"""Observability helpers for the SDK itself.

Request-scoped context shared by the adapters, and the JSON diagnostic
logger the client uses to report its own failures.
"""

__all__ = [
    "logger",
    "context",
]
