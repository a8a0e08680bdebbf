"""
Request logging middleware.
"""

import time
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger()


def client_address(request: Request) -> str:
    """First hop of X-Forwarded-For, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def session_uid(request: Request) -> Optional[str]:
    """UID of the signed-in user, if the session manager is running."""
    manager = getattr(request.app.state, "session_manager", None)
    user = manager.current_user if manager is not None else None
    return user.uid if user else None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its timing and the acting user."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        log = logger.bind(
            request_id=getattr(request.state, "request_id", "unknown"),
            method=request.method,
            path=request.url.path
        )
        log.info("Request started", client_ip=client_address(request), uid=session_uid(request))

        response = await call_next(request)
        elapsed = time.perf_counter() - started

        log.info(
            "Request completed",
            status_code=response.status_code,
            process_time=f"{elapsed:.4f}s",
            uid=session_uid(request)
        )

        response.headers["x-process-time"] = f"{elapsed:.4f}"
        return response
