"""
FastAPI Application Factory
===========================

Entry point for the auth gateway that signs users in against a Cognito
user pool and tracks SMS MFA completion in a session store.

Routers:
    - /auth/*   : Password login and MFA verification
    - /health   : Health check endpoint

Environment Variables Required:
    - COGNITO_USER_POOL_ID: User pool id (e.g. "eu-west-1_AbCdEf123")
    - COGNITO_CLIENT_ID: App client id
    - COGNITO_REGION: AWS region of the pool
    - COGNITO_CLIENT_SECRET: App client secret (optional)
    - SESSION_STORE_URI: "memory://" or a DynamoDB endpoint URL
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn authgate.main:app --reload --host 0.0.0.0 --port 8080

    Production:
        uvicorn authgate.main:app --host 0.0.0.0 --port 8080 --workers 4
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authgate import __version__
from authgate.auth import auth_router
from authgate.auth.cognito import build_identity_provider
from authgate.auth.store import InMemorySessionStore, build_session_store
from authgate.config import get_settings, validate_configuration
from authgate.models import ErrorResponse, HealthResponse

logger = logging.getLogger("authgate.main")


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup builds the Cognito adapter and the session store unless they
    were already placed on ``app.state`` (tests do this).
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    status_report = validate_configuration(settings)
    for warning in status_report["warnings"]:
        logger.warning(warning)
    for error in status_report["errors"]:
        logger.error(error)

    if getattr(app.state, "identity_provider", None) is None:
        app.state.identity_provider = build_identity_provider(settings)
    if getattr(app.state, "session_store", None) is None:
        app.state.session_store = build_session_store(settings)

    logger.info(
        "Auth gateway started",
        extra={
            "issuer": settings.cognito_issuer,
            "session_store": settings.SESSION_STORE_URI,
            "version": __version__,
        }
    )

    yield

    logger.info("Auth gateway shutdown complete")


def create_app() -> FastAPI:
    """
    Application factory function.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Auth Gateway",
        description="Cognito password login with SMS multi-factor verification",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    if settings.allowed_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins_list,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(auth_router)

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        store = getattr(request.app.state, "session_store", None)
        store_kind = "memory" if isinstance(store, InMemorySessionStore) else "dynamodb"
        return HealthResponse(
            status="ok",
            service="authgate",
            dependencies={"session_store": store_kind},
        )

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, Any]:
        """
        Root endpoint with service information.
        """
        return {
            "service": "authgate",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "login": "/auth/login",
                "mfa": "/auth/mfa",
            }
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Store failures after a successful provider call end up here; nothing
        is rolled back.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        body = ErrorResponse(
            error="internal_server_error",
            message="An unexpected error occurred",
            detail=str(exc) if get_settings().LOG_LEVEL == "DEBUG" else None,
        )
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "authgate.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
