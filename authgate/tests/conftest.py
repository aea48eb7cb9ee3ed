"""
Shared fixtures for the auth gateway tests.

Environment defaults are set before ``authgate.main`` is imported, since the
module builds the application at import time.
"""

import os
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("COGNITO_USER_POOL_ID", "eu-west-1_TestPool1")
os.environ.setdefault("COGNITO_CLIENT_ID", "test-client-id")
os.environ.setdefault("COGNITO_REGION", "eu-west-1")
os.environ.setdefault("SESSION_STORE_URI", "memory://")

from authgate.auth.cognito import CognitoIdentityProvider  # noqa: E402
from authgate.auth.store import InMemorySessionStore  # noqa: E402
from authgate.config import Settings, get_settings  # noqa: E402
from authgate.main import create_app  # noqa: E402

BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


@pytest.fixture
def settings():
    """Settings object independent of the process environment."""
    return Settings(
        _env_file=None,
        COGNITO_USER_POOL_ID="eu-west-1_TestPool1",
        COGNITO_CLIENT_ID="test-client-id",
        COGNITO_REGION="eu-west-1",
        SESSION_STORE_URI="memory://",
    )


@pytest.fixture
def provider():
    """Mock Cognito adapter."""
    return Mock(spec=CognitoIdentityProvider)


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def app(settings, provider, store):
    app = create_app()
    app.state.identity_provider = provider
    app.state.session_store = store
    app.dependency_overrides[get_settings] = lambda: settings
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app, headers={"User-Agent": BROWSER_UA}) as client:
        yield client
