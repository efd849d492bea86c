"""FastAPI / Starlette integration."""

from timber.fastapi.middleware import TimberMiddleware, attach, level_for_status

__all__ = ["TimberMiddleware", "attach", "level_for_status"]
