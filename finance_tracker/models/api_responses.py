"""
Pydantic models for API responses to improve OpenAPI documentation.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..utils.constants import NotificationLevel, SessionStatus


class HealthCheckResponse(BaseModel):
    """Response model for basic health check."""
    status: str = Field(..., description="Service health status", example="healthy")
    timestamp: str = Field(..., description="Current timestamp in ISO format", example="2024-01-15T10:30:00Z")
    version: str = Field(..., description="Application version", example="1.0.0")
    environment: str = Field(..., description="Current environment", example="production")
    app_name: str = Field(..., description="Application name", example="finance-tracker-api")


class ReadinessResponse(BaseModel):
    """Response model for readiness probe."""
    status: str = Field(..., description="Readiness status", example="ready")
    session: SessionStatus = Field(..., description="Session lifecycle state", example="anonymous")


class Notification(BaseModel):
    """A message shown to the user once."""
    id: int = Field(..., description="Sequence number", example=1)
    level: NotificationLevel = Field(..., description="Severity", example="success")
    message: str = Field(..., description="Text shown to the user", example="Expense added successfully!")
    created_at: datetime = Field(default_factory=datetime.utcnow)


class NotificationFeed(BaseModel):
    """Notifications not yet shown to the user."""
    notifications: List[Notification] = Field(default_factory=list)


class CategoryCatalog(BaseModel):
    """Allowed categories per transaction type."""
    income: List[str] = Field(..., example=["Salary", "Freelance"])
    expense: List[str] = Field(..., example=["Food & Dining", "Shopping"])


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str = Field(..., example="Verification email sent")
    detail: Optional[str] = None
