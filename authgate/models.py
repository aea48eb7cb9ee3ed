"""
Data Models Module

Pydantic models for the session record kept between the two login steps,
the provider outcome passed from the Cognito adapter to the routes, and the
JSON responses of the system endpoints.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Session Models
# ============================================================================

class SessionRecord(BaseModel):
    """Login session persisted between password and MFA steps."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Record identifier")
    username: str = Field(..., description="Cognito username")
    user_agent: str = Field(default="", description="User-Agent recorded at login")
    remote_addr: str = Field(default="", description="Client address recorded at login")
    mfa_verified: bool = Field(default=False, description="Second factor completed")
    challenge_session: Optional[str] = Field(
        None, description="Opaque Cognito session needed to answer the challenge"
    )
    created_at: datetime = Field(default_factory=_utcnow, description="Creation timestamp")


# ============================================================================
# Provider Models
# ============================================================================

class AuthOutcome(BaseModel):
    """
    Result of a Cognito call: either an issued token or a pending challenge.

    The token is opaque; it is never decoded or validated here.
    """
    token: Optional[str] = Field(None, description="Issued access token")
    challenge_name: Optional[str] = Field(None, description="Pending challenge, e.g. SMS_MFA")
    session: Optional[str] = Field(None, description="Cognito session for the challenge")

    @property
    def is_challenge(self) -> bool:
        return self.challenge_name is not None


# ============================================================================
# Health Check Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    dependencies: Optional[Dict[str, str]] = Field(None, description="Dependency health status")


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[Any] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
