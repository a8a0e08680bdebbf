"""
Tests for main FastAPI application.
"""

from unittest.mock import MagicMock

import pytest

from finance_tracker.main import create_app
from finance_tracker.utils.constants import SessionStatus


@pytest.mark.unit
class TestMainApp:
    """Test main FastAPI application."""

    def test_create_app(self):
        """Test app creation."""
        app = create_app()
        paths = app.openapi()["paths"]

        assert app.title == "Finance Tracker API"
        assert "/api/v1/health" in paths
        assert "/api/v1/auth/sign-in" in paths
        assert "/api/v1/transactions/form/submit" in paths
        assert "/api/v1/preferences/currency" in paths

    def test_root_endpoint(self, app_client):
        """Test root endpoint."""
        response = app_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert "message" in data
        assert "version" in data
        assert data["health_check"] == "/api/v1/health"

    def test_health_check_endpoint(self, app_client):
        """Test health check endpoint."""
        response = app_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "version" in data
        assert "environment" in data

    def test_lifespan_wires_services(self, app_client):
        state = app_client.app.state

        assert state.session_manager.status in (SessionStatus.LOADING, SessionStatus.ANONYMOUS)
        assert state.entry_form.session is state.session_manager
        assert state.entry_form.currency is state.currency_service
        assert state.transaction_service.firestore is state.entry_form.firestore

    def test_security_headers(self, app_client):
        """Test security headers are present."""
        response = app_client.get("/api/v1/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "x-process-time" in response.headers

    def test_request_id_is_echoed(self, app_client):
        response = app_client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["x-request-id"] == "req-123"

    def test_request_id_is_generated(self, app_client):
        response = app_client.get("/api/v1/health")

        assert len(response.headers["x-request-id"]) == 36

    def test_app_exception_envelope(self, app_client):
        response = app_client.get("/api/v1/transactions", headers={"X-Request-ID": "req-1"})

        assert response.status_code == 401
        body = response.json()
        assert body["error"]["code"] == "NOT_AUTHENTICATED"
        assert body["error"]["message"] == "No user is logged in"
        assert body["meta"]["request_id"] == "req-1"
        assert body["meta"]["path"] == "/api/v1/transactions"

    def test_unexpected_exception_returns_500(self, app_client):
        app_client.app.state.notification_center.drain = MagicMock(side_effect=RuntimeError("boom"))

        response = app_client.get("/api/v1/notifications")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_SERVER_ERROR"
