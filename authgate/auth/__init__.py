"""
Authentication Package

Password sign-in and SMS multi-factor verification against a Cognito user
pool, with a session record bridging the two steps.

Modules:
- routes: Public endpoints (/auth/login, /auth/mfa)
- cognito: Adapter over the boto3 cognito-idp client
- store: Session record persistence (DynamoDB or in-memory)
- dependencies: FastAPI dependencies resolving the adapters from app state
- utils: Browser check, client address and error formatting

The flow:
1. Client posts username/password to /auth/login
2. Cognito answers with a token or an SMS_MFA challenge
3. On a challenge, an unverified session is stored and the user gets a code
4. Client posts the code to /auth/mfa, the session is marked verified and
   the token is returned
"""

from .routes import auth_router

__all__ = [
    "auth_router",
]
