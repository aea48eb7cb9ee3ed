"""
Cognito identity provider adapter.

Wraps the two ``cognito-idp`` calls the login flow needs:

- ``InitiateAuth`` with the ``USER_PASSWORD_AUTH`` flow
- ``RespondToAuthChallenge`` for the ``SMS_MFA`` challenge

Both return an :class:`AuthOutcome`. Cognito errors are raised as
:class:`IdentityProviderError` carrying the provider's own message.
"""

import base64
import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from authgate.config import Settings
from authgate.models import AuthOutcome

logger = logging.getLogger(__name__)

PASSWORD_AUTH_FLOW = "USER_PASSWORD_AUTH"
SMS_MFA_CHALLENGE = "SMS_MFA"


class IdentityProviderError(Exception):
    """Raised when a Cognito call fails."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


def compute_secret_hash(username: str, client_id: str, client_secret: str) -> str:
    """
    Compute the SECRET_HASH Cognito requires for app clients with a secret.

    Base64 of HMAC-SHA256 keyed by the client secret over username + client id.
    """
    digest = hmac.new(
        client_secret.encode("utf-8"),
        (username + client_id).encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("utf-8")


class CognitoIdentityProvider:
    """Thin adapter over a boto3 ``cognito-idp`` client."""

    def __init__(self, client: Any, client_id: str, client_secret: Optional[str] = None):
        self.client = client
        self.client_id = client_id
        self.client_secret = client_secret

    def _with_secret_hash(self, username: str, params: Dict[str, str]) -> Dict[str, str]:
        if self.client_secret:
            params["SECRET_HASH"] = compute_secret_hash(
                username, self.client_id, self.client_secret
            )
        return params

    def initiate_password_auth(self, username: str, password: str) -> AuthOutcome:
        """
        Start a username/password sign-in.

        Raises:
            IdentityProviderError: If Cognito rejects the request
        """
        params = self._with_secret_hash(
            username, {"USERNAME": username, "PASSWORD": password}
        )
        response = self._call(
            "initiate_auth",
            ClientId=self.client_id,
            AuthFlow=PASSWORD_AUTH_FLOW,
            AuthParameters=params,
        )
        return _to_outcome(response)

    def respond_to_sms_challenge(
        self, username: str, code: str, session: Optional[str]
    ) -> AuthOutcome:
        """
        Answer a pending SMS_MFA challenge with the code the user received.

        Raises:
            IdentityProviderError: If the code is wrong, expired, or the
                session is unknown to Cognito
        """
        responses = self._with_secret_hash(
            username, {"USERNAME": username, "SMS_MFA_CODE": code}
        )
        kwargs: Dict[str, Any] = {
            "ClientId": self.client_id,
            "ChallengeName": SMS_MFA_CHALLENGE,
            "ChallengeResponses": responses,
        }
        # botocore rejects Session=None
        if session:
            kwargs["Session"] = session
        response = self._call("respond_to_auth_challenge", **kwargs)
        return _to_outcome(response)

    def _call(self, operation: str, **kwargs) -> Dict[str, Any]:
        try:
            return getattr(self.client, operation)(**kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            message = error.get("Message") or str(e)
            code = error.get("Code")
            logger.warning(
                f"Cognito {operation} failed: {code}",
                extra={"operation": operation, "error_code": code},
            )
            raise IdentityProviderError(message, code) from e
        except BotoCoreError as e:
            logger.error(f"Cognito {operation} unreachable: {e}")
            raise IdentityProviderError(str(e)) from e


def _to_outcome(response: Dict[str, Any]) -> AuthOutcome:
    result = response.get("AuthenticationResult")
    if result:
        return AuthOutcome(token=result.get("AccessToken"))
    return AuthOutcome(
        challenge_name=response.get("ChallengeName"),
        session=response.get("Session"),
    )


def build_identity_provider(settings: Settings) -> CognitoIdentityProvider:
    """Create the provider adapter for the configured user pool."""
    client = boto3.client("cognito-idp", region_name=settings.COGNITO_REGION)
    return CognitoIdentityProvider(
        client,
        client_id=settings.COGNITO_CLIENT_ID,
        client_secret=settings.COGNITO_CLIENT_SECRET,
    )
