"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from .config import settings
from .routers import auth, health, notifications, preferences, transactions
from .middleware.error_handler import ErrorHandlerMiddleware, app_exception_handler
from .middleware.logging import LoggingMiddleware
from .middleware.security import SecurityHeadersMiddleware
from .utils.exceptions import AppException
from .infrastructure import cleanup_firestore, cleanup_identity_client, get_firestore, get_identity_client
from .services import (
    CurrencyService,
    NotificationCenter,
    SessionManager,
    TransactionEntryForm,
    TransactionService,
)


# Configure structured logging
def configure_logging():
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=None,
        level=getattr(logging, settings.log_level),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    configure_logging()
    logger = structlog.get_logger()

    logger.info(
        "Application starting up",
        app_name=settings.app_name,
        version=settings.version,
        environment=settings.environment,
        debug=settings.debug
    )

    firestore = get_firestore()
    identity = get_identity_client()

    notification_center = NotificationCenter(settings.notification_history_size)
    currency_service = CurrencyService(firestore, default_currency=settings.default_currency)
    session_manager = SessionManager(identity, firestore)

    # Currency follows whoever is signed in
    unsubscribe_currency = session_manager.subscribe(currency_service.handle_session_change)
    await session_manager.start()

    app.state.session_manager = session_manager
    app.state.currency_service = currency_service
    app.state.notification_center = notification_center
    app.state.entry_form = TransactionEntryForm(
        session_manager, currency_service, notification_center, firestore
    )
    app.state.transaction_service = TransactionService(firestore)
    logger.info("Services initialized")

    yield

    # Shutdown
    logger.info("Application shutting down")

    unsubscribe_currency()
    await session_manager.stop()
    await cleanup_identity_client()
    await cleanup_firestore()
    logger.info("Resources cleaned up")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title="Finance Tracker API",
        version=settings.version,
        description="""
**Finance Tracker API** - Session, income/expense entry and currency preferences
for a single-user personal finance tracker.

## Authentication

Email/password accounts backed by Firebase Authentication. New accounts must
verify their email address before signing in.
        """,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=None,
        openapi_url=settings.openapi_url,
        lifespan=lifespan
    )

    cors_origins = settings.get_cors_origins_list()
    if settings.debug and not cors_origins:
        # Default CORS for development
        cors_origins = [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173"
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID", "Accept", "Origin"],
        expose_headers=["X-Request-ID", "X-Process-Time"]
    )

    # Custom middleware (order matters - last added is executed first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    app.add_exception_handler(AppException, app_exception_handler)

    app.include_router(
        health.router,
        prefix=settings.api_prefix,
        tags=["health"]
    )

    app.include_router(
        auth.router,
        prefix=f"{settings.api_prefix}/auth",
        tags=["authentication"]
    )

    app.include_router(
        transactions.router,
        prefix=settings.api_prefix,
        tags=["transactions"]
    )

    app.include_router(
        notifications.router,
        prefix=settings.api_prefix,
        tags=["notifications"]
    )

    app.include_router(
        preferences.router,
        prefix=settings.api_prefix,
        tags=["preferences"]
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.version,
            "docs_url": settings.docs_url,
            "health_check": f"{settings.api_prefix}/health"
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "finance_tracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
