"""Request context helpers using ContextVars.

The HTTP middleware sets ``request_id_var`` for the lifetime of a request so
that log records emitted while handling it can be correlated.
"""

from contextvars import ContextVar
from typing import Optional


# Public ContextVars (names are stable API)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

