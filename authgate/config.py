"""
Configuration module for the auth gateway.

This module uses Pydantic Settings to load and validate environment variables
for the Cognito user pool, the session store and the HTTP surface.

Environment variables are loaded from .env file or system environment.
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # =========================================================================
    # Cognito User Pool Configuration
    # =========================================================================

    COGNITO_USER_POOL_ID: str = Field(
        ...,
        description="Cognito user pool id (e.g., eu-west-1_AbCdEf123)",
        min_length=1,
    )

    COGNITO_CLIENT_ID: str = Field(
        ...,
        description="Cognito app client id",
        min_length=1,
    )

    COGNITO_CLIENT_SECRET: Optional[str] = Field(
        None,
        description="Cognito app client secret (only for clients created with a secret)",
    )

    COGNITO_REGION: str = Field(
        ...,
        description="AWS region hosting the user pool",
        min_length=1,
    )

    # =========================================================================
    # Session Store Configuration
    # =========================================================================

    SESSION_STORE_URI: str = Field(
        default="memory://",
        description="Session store location: 'memory://' or a DynamoDB endpoint URL",
    )

    SESSION_TABLE_NAME: str = Field(
        default="auth_sessions",
        description="DynamoDB table holding session records",
        min_length=1,
    )

    # =========================================================================
    # Login Behaviour
    # =========================================================================

    REQUIRE_BROWSER_CLIENT: bool = Field(
        default=True,
        description="Reject /auth/login requests whose User-Agent has no browser signature",
    )

    BROWSER_SIGNATURES: str = Field(
        default="Mozilla,Chrome",
        description="Comma-separated User-Agent substrings accepted as browsers",
    )

    PERSIST_DIRECT_LOGIN: bool = Field(
        default=False,
        description="Persist a session record when login succeeds without an MFA challenge",
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    HOST: str = Field(default="0.0.0.0", description="Host to bind the server")

    PORT: int = Field(default=8080, description="Port to bind the server", ge=1, le=65535)

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def browser_signatures_list(self) -> List[str]:
        """Parse BROWSER_SIGNATURES into a list of non-empty tokens."""
        return [s.strip() for s in self.BROWSER_SIGNATURES.split(",") if s.strip()]

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    @property
    def cognito_issuer(self) -> str:
        """Issuer URL of tokens minted by the configured user pool."""
        return (
            f"https://cognito-idp.{self.COGNITO_REGION}.amazonaws.com/"
            f"{self.COGNITO_USER_POOL_ID}"
        )

    @property
    def uses_memory_store(self) -> bool:
        return self.SESSION_STORE_URI.startswith("memory://")

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("COGNITO_USER_POOL_ID")
    @classmethod
    def validate_pool_id(cls, v: str) -> str:
        """
        Validate that the pool id looks like '<region>_<id>'.

        Raises:
            ValueError: If the id has no region prefix
        """
        if not re.match(r"^[a-z]{2}(-[a-z]+)+-\d_[0-9A-Za-z]+$", v):
            raise ValueError(
                f"Invalid user pool id: {v}. Expected format: <region>_<id>"
            )
        return v

    @field_validator("SESSION_STORE_URI")
    @classmethod
    def validate_store_uri(cls, v: str) -> str:
        if v.startswith("memory://") or v.startswith(("http://", "https://")):
            return v
        raise ValueError(
            f"Unsupported SESSION_STORE_URI: '{v}'. "
            "Use 'memory://' or an http(s) DynamoDB endpoint"
        )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = v.upper()
        if level not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}, got: {v}")
        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Cached so that settings are loaded only once during the application
    lifecycle. Call ``get_settings.cache_clear()`` to reload.

    Raises:
        ValidationError: If required environment variables are missing
                        or invalid.
    """
    return Settings()


def validate_configuration(settings: Optional[Settings] = None) -> dict:
    """
    Validate critical configuration settings and return a status report.

    Example:
        >>> status = validate_configuration()
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    settings = settings or get_settings()
    errors = []
    warnings = []

    if not settings.COGNITO_USER_POOL_ID.startswith(settings.COGNITO_REGION + "_"):
        errors.append("COGNITO_USER_POOL_ID does not belong to COGNITO_REGION")

    if not settings.COGNITO_CLIENT_SECRET:
        warnings.append("COGNITO_CLIENT_SECRET is not set (SECRET_HASH will not be sent)")

    if settings.uses_memory_store:
        warnings.append("SESSION_STORE_URI is memory:// (sessions are lost on restart)")

    if settings.REQUIRE_BROWSER_CLIENT and not settings.browser_signatures_list:
        errors.append("REQUIRE_BROWSER_CLIENT is set but BROWSER_SIGNATURES is empty")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "issuer": settings.cognito_issuer,
        "session_store": settings.SESSION_STORE_URI,
    }


if __name__ == "__main__":
    """
    Run this module directly to validate your .env configuration:
        python -m authgate.config
    """
    import json

    print(json.dumps(validate_configuration(), indent=2))
