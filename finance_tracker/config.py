"""
Configuration module using Pydantic Settings.
Handles all environment variables and app configuration.
"""

from typing import List, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # App settings
    app_name: str = Field(default="finance-tracker-api", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="production", description="Environment name")

    # Identity service (Firebase Authentication)
    firebase_api_key: str = Field(..., description="Web API key of the Firebase project")
    use_auth_emulator: bool = Field(default=False, description="Use Firebase Auth emulator")
    auth_emulator_host: str = Field(default="localhost:9099", description="Firebase Auth emulator host")
    identity_request_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for identity service calls"
    )

    # Database
    firestore_project_id: str = Field(..., description="Firestore project ID")
    firestore_database: str = Field(default="(default)", description="Firestore database name")
    use_firestore_emulator: bool = Field(default=False, description="Use Firestore emulator")
    firestore_emulator_host: str = Field(default="localhost:8081", description="Firestore emulator host")
    google_credentials_path: Optional[str] = Field(default=None, description="Path to Google credentials JSON file")

    # Money and notifications
    default_currency: str = Field(default="USD", description="Currency used until user preferences load")
    notification_history_size: int = Field(
        default=50, ge=1, le=1000, description="Notifications kept until the UI drains them"
    )

    # API
    api_prefix: str = Field(default="/api/v1", description="API path prefix")
    cors_origins: str = Field(default="", description="CORS allowed origins (comma-separated)")

    # Monitoring and logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Server settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @validator("environment")
    def validate_environment(cls, v):
        """Validate environment."""
        valid_envs = ["development", "testing", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment. Must be one of: {valid_envs}")
        return v.lower()

    @validator("default_currency")
    def validate_default_currency(cls, v):
        """Validate default currency code."""
        if len(v.strip()) != 3 or not v.strip().isalpha():
            raise ValueError("Invalid currency code. Must be 3 letters")
        return v.strip().upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def docs_url(self) -> Optional[str]:
        """Get docs URL based on environment."""
        return "/docs" if self.debug or self.is_development else None

    @property
    def openapi_url(self) -> Optional[str]:
        """Get OpenAPI URL based on environment."""
        return "/openapi.json" if self.debug or self.is_development else None

    @property
    def identity_base_url(self) -> str:
        """Base URL of the Identity Toolkit REST API."""
        if self.use_auth_emulator:
            return f"http://{self.auth_emulator_host}/identitytoolkit.googleapis.com/v1"
        return "https://identitytoolkit.googleapis.com/v1"

    @property
    def secure_token_url(self) -> str:
        """URL used to exchange refresh tokens for fresh ID tokens."""
        if self.use_auth_emulator:
            return f"http://{self.auth_emulator_host}/securetoken.googleapis.com/v1/token"
        return "https://securetoken.googleapis.com/v1/token"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance. Useful for dependency injection."""
    return settings
