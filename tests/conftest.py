"""
Global pytest configuration and fixtures.
"""

import os
from unittest.mock import patch

# Required settings must exist before the application modules are imported
os.environ.setdefault("FIREBASE_API_KEY", "test-api-key")
os.environ.setdefault("FIRESTORE_PROJECT_ID", "test-project")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from finance_tracker.config import Settings
from finance_tracker.services import (
    CurrencyService,
    NotificationCenter,
    SessionManager,
    TransactionEntryForm,
    TransactionService,
)
from tests.doubles import FakeIdentityProvider, TestDatabase


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Test settings configuration."""
    return Settings(
        app_name="finance-tracker-api-test",
        version="1.0.0-test",
        debug=True,
        environment="testing",

        # Identity
        firebase_api_key="test-api-key",
        identity_request_timeout=5.0,

        # Database
        firestore_project_id="test-project",
        firestore_database="(default)",
        use_firestore_emulator=True,
        firestore_emulator_host="localhost:8081",

        # API
        api_prefix="/api/v1",
        cors_origins="http://localhost:3000",

        # Monitoring
        log_level="DEBUG",

        # Server
        host="127.0.0.1",
        port=8081
    )


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


@pytest.fixture
def test_db() -> TestDatabase:
    """In-memory database."""
    return TestDatabase()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    """Identity provider with no signed-in user."""
    return FakeIdentityProvider()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def currency_service(test_db) -> CurrencyService:
    return CurrencyService(test_db, default_currency="USD")


@pytest_asyncio.fixture
async def session_manager(identity, test_db, currency_service):
    """Started session manager wired to the currency service."""
    manager = SessionManager(identity, test_db)
    manager.subscribe(currency_service.handle_session_change)
    await manager.start()
    await manager.wait_until_ready()
    yield manager
    await manager.stop()
    await identity.close()


@pytest.fixture
def entry_form(session_manager, currency_service, notifications, test_db) -> TransactionEntryForm:
    return TransactionEntryForm(session_manager, currency_service, notifications, test_db)


@pytest.fixture
def transaction_service(test_db) -> TransactionService:
    return TransactionService(test_db)


@pytest.fixture
def app_client(test_db, identity):
    """Test client running the application lifespan against the test doubles."""
    with patch("finance_tracker.main.get_firestore", return_value=test_db), \
            patch("finance_tracker.main.get_identity_client", return_value=identity):
        from finance_tracker.main import app
        with TestClient(app) as client:
            yield client
