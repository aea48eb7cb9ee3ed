"""
Authentication routes for password login and SMS MFA verification.

Both endpoints take form fields and answer in plain text: either the token
Cognito issued, a fixed instruction string, or an error string carrying
the provider's message. Errors are not mapped to HTTP status codes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse

from authgate.config import Settings, get_settings
from authgate.models import SessionRecord
from authgate.auth.cognito import (
    CognitoIdentityProvider,
    IdentityProviderError,
    SMS_MFA_CHALLENGE,
)
from authgate.auth.dependencies import get_identity_provider, get_session_store
from authgate.auth.store import SessionStore
from authgate.auth.utils import client_origin, format_provider_error, is_browser_client

logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

auth_router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
)

UNSUPPORTED_CLIENT = "Unsupported client"
MFA_CODE_SENT = (
    "An SMS verification code has been sent. "
    "Submit it to /auth/mfa to complete sign-in."
)
SESSION_NOT_FOUND = "Session not found"


# =============================================================================
# Login Endpoint
# =============================================================================

@auth_router.post("/login", response_class=PlainTextResponse)
def login(
    request: Request,
    username: str = Form(..., min_length=1),
    password: str = Form(..., min_length=1),
    provider: CognitoIdentityProvider = Depends(get_identity_provider),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """
    Start a sign-in with username and password.

    This endpoint:
    1. Optionally rejects clients without a browser User-Agent
    2. Sends USER_PASSWORD_AUTH to Cognito
    3. On an SMS_MFA challenge, stores an unverified session and tells the
       user to submit the code
    4. Otherwise returns the issued access token as-is

    Returns:
        PlainTextResponse with the token, an instruction, or an error string
    """
    user_agent = request.headers.get("user-agent", "")

    if settings.REQUIRE_BROWSER_CLIENT and not is_browser_client(
        user_agent, settings.browser_signatures_list
    ):
        logger.info("Rejected non-browser login", extra={"user_agent": user_agent})
        return PlainTextResponse(UNSUPPORTED_CLIENT)

    try:
        outcome = provider.initiate_password_auth(username, password)
    except IdentityProviderError as e:
        logger.info("Login failed", extra={"username": username, "error_code": e.code})
        return PlainTextResponse(format_provider_error("Error logging in", e))

    record = SessionRecord(
        username=username,
        user_agent=user_agent,
        remote_addr=client_origin(request),
        mfa_verified=False,
        challenge_session=outcome.session,
    )

    if outcome.challenge_name == SMS_MFA_CHALLENGE:
        store.save(record)
        logger.info("SMS challenge issued", extra={"username": username, "session_id": record.id})
        return PlainTextResponse(MFA_CODE_SENT)

    if outcome.is_challenge:
        logger.warning(
            "Unsupported challenge",
            extra={"username": username, "challenge": outcome.challenge_name},
        )
        return PlainTextResponse(f"Unsupported challenge: {outcome.challenge_name}")

    if not outcome.token:
        return PlainTextResponse("Error logging in: no token issued")

    if settings.PERSIST_DIRECT_LOGIN:
        store.save(record)

    logger.info("Login succeeded without challenge", extra={"username": username})
    return PlainTextResponse(outcome.token)


# =============================================================================
# MFA Endpoint
# =============================================================================

@auth_router.post("/mfa", response_class=PlainTextResponse)
def verify_mfa(
    code: str = Form(..., pattern=r"^\d+$"),
    username: Optional[str] = Form(None),
    session: Optional[str] = Form(None),
    provider: CognitoIdentityProvider = Depends(get_identity_provider),
    store: SessionStore = Depends(get_session_store),
):
    """
    Complete a sign-in by answering the SMS challenge.

    Form Fields:
        code: Numeric code received by SMS
        username: Username used at login
        session: Accepted in place of username by older clients

    Returns:
        PlainTextResponse with the token or an error string
    """
    name = username or session
    if not name:
        return PlainTextResponse(SESSION_NOT_FOUND)

    record = store.find_by_username(name)
    if record is None:
        logger.info("MFA for unknown session", extra={"username": name})
        return PlainTextResponse(SESSION_NOT_FOUND)

    try:
        outcome = provider.respond_to_sms_challenge(
            record.username, code, record.challenge_session
        )
    except IdentityProviderError as e:
        logger.info("MFA verification failed", extra={"username": name, "error_code": e.code})
        return PlainTextResponse(format_provider_error("Error verifying MFA code", e))

    if not outcome.token:
        return PlainTextResponse(
            f"Error verifying MFA code: unexpected challenge {outcome.challenge_name}"
        )

    record.mfa_verified = True
    store.save(record)

    logger.info("MFA verified", extra={"username": name, "session_id": record.id})
    return PlainTextResponse(outcome.token)
