"""
Custom exceptions for the application.
All business logic and technical exceptions are defined here.
"""

from typing import List, Optional


class AppException(Exception):
    """Base exception for all application exceptions."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = 500,
        details: Optional[List[str]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[List[str]] = None,
        code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            details=details
        )


class AuthenticationError(AppException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[List[str]] = None,
        code: str = "AUTHENTICATION_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
            details=details
        )


class AuthorizationError(AppException):
    """Raised when authorization fails."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[List[str]] = None,
        code: str = "AUTHORIZATION_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=403,
            details=details
        )


class NotFoundError(AppException):
    """Raised when a resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        code: str = "NOT_FOUND"
    ):
        if resource_id:
            message = f"{resource_type.title()} with ID '{resource_id}' not found"

        super().__init__(
            message=message,
            code=code,
            status_code=404,
            details=[f"Resource type: {resource_type}"]
        )


class ConflictError(AppException):
    """Raised when a resource conflict occurs."""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[List[str]] = None,
        code: str = "CONFLICT_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            details=details
        )


class DatabaseError(AppException):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[List[str]] = None,
        code: str = "DATABASE_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=500,
            details=details
        )


class ExternalServiceError(AppException):
    """Raised when external service calls fail."""

    def __init__(
        self,
        message: str = "External service error",
        service_name: str = "unknown",
        details: Optional[List[str]] = None,
        code: str = "EXTERNAL_SERVICE_ERROR",
        status_code: int = 502
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details or [f"Service: {service_name}"]
        )


class RateLimitError(AppException):
    """Raised when rate limits are exceeded."""

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        retry_after: Optional[int] = None
    ):
        details = []
        if retry_after:
            details.append(f"Retry after: {retry_after} seconds")

        super().__init__(
            message=message,
            code="RATE_LIMIT_ERROR",
            status_code=429,
            details=details
        )


# Session errors translated from identity provider codes

class InvalidCredentialsError(AuthenticationError):
    """Raised when the identity provider rejects an email/password pair."""

    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message=message, code="INVALID_CREDENTIALS")


class NotAuthenticatedError(AuthenticationError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "No user is logged in"):
        super().__init__(message=message, code="NOT_AUTHENTICATED")


class UnverifiedEmailError(AuthorizationError):
    """Raised when a user signs in before verifying their email address."""

    def __init__(self, message: str = "Please verify your email before signing in."):
        super().__init__(message=message, code="EMAIL_NOT_VERIFIED")


class EmailAlreadyInUseError(ConflictError):
    """Raised when signing up with an email that already has an account."""

    def __init__(self, message: str = "Email already in use. Please use a different email."):
        super().__init__(message=message, code="EMAIL_ALREADY_IN_USE")


class NoAccountFoundError(NotFoundError):
    """Raised when a password reset targets an unknown email."""

    def __init__(self, message: str = "No account found with this email."):
        super().__init__(message=message, resource_type="account", code="NO_ACCOUNT_FOUND")


# Transaction entry errors

class InvalidAmountError(ValidationError):
    """Raised when a transaction amount is not a number greater than zero."""

    def __init__(
        self,
        message: str = "Please enter a valid amount greater than 0",
        details: Optional[List[str]] = None
    ):
        super().__init__(message=message, details=details, code="INVALID_AMOUNT")


class InvalidCategoryError(ValidationError):
    """Raised when a category does not belong to the selected transaction type."""

    def __init__(self, category: str, transaction_type: str):
        super().__init__(
            message=f"Please select a valid {transaction_type} category",
            details=[f"Category: {category!r}"],
            code="INVALID_CATEGORY"
        )
