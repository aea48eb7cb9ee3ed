from fastapi import HTTPException, Request, status

from authgate.auth.cognito import CognitoIdentityProvider
from authgate.auth.store import SessionStore


def get_identity_provider(request: Request) -> CognitoIdentityProvider:
    """
    Dependency returning the provider adapter built at startup.
    """
    provider = getattr(request.app.state, "identity_provider", None)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider not initialised",
        )
    return provider


def get_session_store(request: Request) -> SessionStore:
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session store not initialised",
        )
    return store
