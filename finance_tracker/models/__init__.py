"""
Pydantic models for the finance tracker.
"""
from .auth import (
    CurrencyPreference,
    IdentityUser,
    NotificationPreferences,
    PasswordResetRequest,
    ProfileFields,
    ProfileResponse,
    SessionResponse,
    SessionState,
    SignInRequest,
    SignUpRequest,
    UserProfile,
    UserProfileUpdate,
    UserSettings,
)
from .base import DocumentModel, TimestampedModel
from .financial import (
    CategorySummary,
    EntryFormState,
    EntryFormUpdate,
    SubmissionResult,
    SubmissionStatus,
    Transaction,
    TransactionsSummary,
)

__all__ = [
    # Base models
    "DocumentModel",
    "TimestampedModel",
    # Auth models
    "CurrencyPreference",
    "IdentityUser",
    "NotificationPreferences",
    "PasswordResetRequest",
    "ProfileFields",
    "ProfileResponse",
    "SessionResponse",
    "SessionState",
    "SignInRequest",
    "SignUpRequest",
    "UserProfile",
    "UserProfileUpdate",
    "UserSettings",
    # Financial models
    "CategorySummary",
    "EntryFormState",
    "EntryFormUpdate",
    "SubmissionResult",
    "SubmissionStatus",
    "Transaction",
    "TransactionsSummary",
]
