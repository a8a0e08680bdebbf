"""
Authentication, session and user profile models.
"""
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..utils.constants import (
    DEFAULT_CURRENCY,
    DEFAULT_EMAIL_NOTIFICATIONS,
    DEFAULT_PUSH_NOTIFICATIONS,
    DEFAULT_THEME,
    MAX_NAME_LENGTH,
    SessionStatus,
    Theme,
)
from .base import DocumentModel, TimestampedModel


class ProfileFields(DocumentModel):
    """Profile data collected at sign-up."""

    first_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    date_of_birth: str = Field(default="", description="ISO date as entered by the user")
    phone: str = Field(default="", max_length=30)
    address: str = Field(default="", max_length=200)
    city: str = Field(default="", max_length=MAX_NAME_LENGTH)
    country: str = Field(default="", max_length=MAX_NAME_LENGTH)
    security_question: str = Field(default="", max_length=200)
    security_answer: str = Field(default="", max_length=200)


class UserProfile(ProfileFields, TimestampedModel):
    """User profile stored in users/{uid}."""

    email: EmailStr

    model_config = ConfigDict(extra="ignore")


class UserProfileUpdate(DocumentModel):
    """Partial profile update. Email is set once at sign-up and never updated."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    date_of_birth: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=MAX_NAME_LENGTH)
    country: Optional[str] = Field(None, max_length=MAX_NAME_LENGTH)
    security_question: Optional[str] = Field(None, max_length=200)
    security_answer: Optional[str] = Field(None, max_length=200)

    model_config = ConfigDict(extra="forbid")


class NotificationPreferences(DocumentModel):
    """Notification channels a user opted into."""

    email: bool = Field(default=DEFAULT_EMAIL_NOTIFICATIONS)
    push: bool = Field(default=DEFAULT_PUSH_NOTIFICATIONS)


class UserSettings(DocumentModel):
    """Preferences stored in users/{uid}/settings/preferences."""

    currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)
    theme: Theme = Field(default=DEFAULT_THEME)
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(extra="ignore", use_enum_values=True)


class IdentityUser(BaseModel):
    """Identity issued by the identity service."""

    uid: str
    email: Optional[str] = None
    email_verified: bool = False

    # Credentials stay in process memory only
    id_token: Optional[str] = Field(default=None, exclude=True, repr=False)
    refresh_token: Optional[str] = Field(default=None, exclude=True, repr=False)
    token_expires_at: Optional[datetime] = Field(default=None, exclude=True, repr=False)

    def token_expired(self, leeway_seconds: int = 60) -> bool:
        """Check whether the ID token needs a refresh."""
        if self.token_expires_at is None:
            return False
        return datetime.utcnow() >= self.token_expires_at - timedelta(seconds=leeway_seconds)


class SessionState(BaseModel):
    """Snapshot of who is logged in."""

    user: Optional[IdentityUser] = None
    profile: Optional[UserProfile] = None
    loading: bool = True
    status: SessionStatus = SessionStatus.UNINITIALIZED


class ProfileResponse(UserProfile):
    """Profile as returned to the client. The security answer never leaves the server."""

    security_answer: str = Field(default="", exclude=True)


class SessionResponse(BaseModel):
    """Session snapshot as returned to the client."""

    user: Optional[IdentityUser] = None
    profile: Optional[ProfileResponse] = None
    loading: bool = True
    status: SessionStatus = SessionStatus.UNINITIALIZED


# DTOs for API requests
class SignInRequest(BaseModel):
    """Sign-in request with email/password."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class SignUpRequest(BaseModel):
    """Registration request."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    profile: ProfileFields


class PasswordResetRequest(BaseModel):
    """Password reset email request."""
    email: EmailStr


class CurrencyPreference(BaseModel):
    """Active currency of the session."""
    currency: str = Field(..., min_length=3, max_length=3)
