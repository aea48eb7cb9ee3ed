"""
Application factory tests: startup wiring and the global error handler.
"""

from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

from authgate.auth.cognito import CognitoIdentityProvider
from authgate.auth.store import InMemorySessionStore, StoreError
from authgate.config import get_settings
from authgate.main import create_app
from authgate.models import AuthOutcome, SessionRecord


@pytest.fixture
def log_level(monkeypatch):
    """Reload settings with the given LOG_LEVEL, restoring the cache afterwards."""
    def _set(level):
        monkeypatch.setenv("LOG_LEVEL", level)
        get_settings.cache_clear()

    yield _set
    get_settings.cache_clear()


def failing_app(provider):
    app = create_app()
    store = Mock()
    store.find_by_username.return_value = SessionRecord(
        username="alice", challenge_session="sess"
    )
    store.save.side_effect = StoreError("table unavailable")
    app.state.identity_provider = provider
    app.state.session_store = store
    return app


class TestLifespan:

    def test_startup_builds_provider_and_store(self):
        app = create_app()

        with patch("authgate.auth.cognito.boto3.client") as mock_client:
            with TestClient(app) as client:
                response = client.post(
                    "/auth/mfa", data={"username": "nobody", "code": "123456"}
                )

        mock_client.assert_called_once_with("cognito-idp", region_name="eu-west-1")
        assert isinstance(app.state.identity_provider, CognitoIdentityProvider)
        assert app.state.identity_provider.client is mock_client.return_value
        assert isinstance(app.state.session_store, InMemorySessionStore)
        assert response.text == "Session not found"


class TestGlobalExceptionHandler:

    @pytest.fixture
    def provider(self):
        provider = Mock(spec=CognitoIdentityProvider)
        provider.respond_to_sms_challenge.return_value = AuthOutcome(token="t")
        return provider

    def test_detail_hidden_at_info(self, log_level, provider):
        log_level("INFO")

        with TestClient(failing_app(provider), raise_server_exceptions=False) as client:
            response = client.post("/auth/mfa", data={"username": "alice", "code": "1"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["detail"] is None

    def test_detail_shown_at_debug(self, log_level, provider):
        log_level("DEBUG")

        with TestClient(failing_app(provider), raise_server_exceptions=False) as client:
            response = client.post("/auth/mfa", data={"username": "alice", "code": "1"})

        assert response.status_code == 500
        assert response.json()["detail"] == "table unavailable"
