"""
Dependency injection utilities for FastAPI.

The lifespan stores the services on ``app.state``; these helpers hand them
to route handlers.
"""
from fastapi import Depends, Request

from ..models.auth import IdentityUser
from ..services import (
    CurrencyService,
    NotificationCenter,
    SessionManager,
    TransactionEntryForm,
    TransactionService,
)
from .exceptions import NotAuthenticatedError


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise RuntimeError(f"{name} is not available outside the application lifespan")
    return service


def get_session_manager(request: Request) -> SessionManager:
    return _service(request, "session_manager")


async def get_ready_session(
    session: SessionManager = Depends(get_session_manager)
) -> SessionManager:
    """Session manager once the first auth state is known."""
    await session.wait_until_ready()
    return session


async def get_current_user(
    session: SessionManager = Depends(get_ready_session)
) -> IdentityUser:
    """Signed-in identity, or 401."""
    if session.current_user is None:
        raise NotAuthenticatedError()
    return session.current_user


def get_currency_service(request: Request) -> CurrencyService:
    return _service(request, "currency_service")


def get_notification_center(request: Request) -> NotificationCenter:
    return _service(request, "notification_center")


def get_entry_form(request: Request) -> TransactionEntryForm:
    return _service(request, "entry_form")


def get_transaction_service(request: Request) -> TransactionService:
    return _service(request, "transaction_service")
