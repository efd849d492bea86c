"""ASGI middleware that logs one Timber entry per HTTP request."""

from typing import Callable, Any, Dict, Optional
import time
import uuid

from fastapi import FastAPI

from timber.client import Timber
from timber.obs.context import request_id_var
from timber.obs.logger import log_event
from timber.types import LogLevel


# Observed status when the app never started a response
DEFAULT_STATUS = 404


def level_for_status(status: int) -> LogLevel:
    if status >= 500:
        return LogLevel.ERROR
    if 200 <= status < 400:
        return LogLevel.INFO
    return LogLevel.WARN


class TimberMiddleware:
    def __init__(self, app: Any, timber: Timber, name: str = "FastAPI"):
        self.app = app
        self.timber = timber
        self.name = name

    async def __call__(self, scope: dict, receive: Callable, send: Callable[[dict], Any]):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = str(uuid.uuid4())
        token = request_id_var.set(req_id)
        request = {
            "method": scope.get("method", ""),
            "path": scope.get("path", ""),
            "query": (scope.get("query_string") or b"").decode("latin-1"),
        }
        start = time.monotonic()
        status_code: Optional[int] = None

        async def send_wrapper(message: dict):
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 200))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except BaseException as e:
            # Cancellation (client disconnect) still gets its entry
            self._safe_log(self._log_fault, e, request, req_id, status_code, start)
            raise
        else:
            self._safe_log(self._log_response, request, req_id, status_code, start)
        finally:
            request_id_var.reset(token)

    def _safe_log(self, log_fn: Callable, *args: Any) -> None:
        try:
            log_fn(*args)
        except Exception as e:
            log_event(
                "middleware_log_failed",
                level="ERROR",
                error=str(e),
                error_type=type(e).__name__,
            )

    def _log_response(self, request: Dict[str, Any], req_id: str, status_code: Optional[int], start: float) -> None:
        status = DEFAULT_STATUS if status_code is None else status_code
        self.timber.log(
            f"{self.name} HTTP request: {status}",
            level_for_status(status),
            {
                "request_id": req_id,
                "request": request,
                "response": {"status": status, "duration_ms": _elapsed_ms(start)},
            },
        )

    def _log_fault(
        self,
        error: BaseException,
        request: Dict[str, Any],
        req_id: str,
        status_code: Optional[int],
        start: float,
    ) -> None:
        response: Dict[str, Any] = {"duration_ms": _elapsed_ms(start)}
        if status_code is not None:
            response["status"] = status_code
        self.timber.log(
            f"{self.name} HTTP request error: {str(error) or type(error).__name__}",
            LogLevel.ERROR,
            {
                "request_id": req_id,
                "request": request,
                "response": response,
                "error": {"type": type(error).__name__, "message": str(error)},
            },
        )


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000.0, 2)


def attach(app: FastAPI, timber: Timber, name: str = "FastAPI") -> None:
    """Register the middleware on a FastAPI (or Starlette) app."""
    app.add_middleware(TimberMiddleware, timber=timber, name=name)
