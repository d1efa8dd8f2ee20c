"""Pytest configuration and shared fixtures"""

import json
import os
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from prelude_client.auth import OAuthProvider
from prelude_client.client import PreludeClient
from prelude_client.config import Config
from prelude_client.models import AccessToken
from prelude_client.store import MemoryConfigStore

PRELUDE_URL = "https://prelude.test/"
API_URL = "https://prelude.test/api"
TOKEN_URL = "https://prelude.test/oauth/token"


def make_response(status_code=200, payload=None, text=None, url=API_URL, method="GET"):
    """Build a real httpx.Response bound to a request"""
    if text is None:
        text = json.dumps(payload if payload is not None else {})
    return httpx.Response(
        status_code, text=text, request=httpx.Request(method, url)
    )


def make_token(value="test-token", expires_in=3600):
    """Build an AccessToken expiring expires_in seconds from now"""
    return AccessToken(
        value=value, expires_at=datetime.now(UTC) + timedelta(seconds=expires_in)
    )


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears PRELUDE_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    prelude_vars = {
        key: value for key, value in os.environ.items() if key.startswith("PRELUDE_")
    }

    for key in prelude_vars:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key in [key for key in os.environ if key.startswith("PRELUDE_")]:
            os.environ.pop(key, None)
        for key, value in prelude_vars.items():
            os.environ[key] = value


@pytest.fixture
def clean_config(clean_env):
    """Config instance with clean environment"""
    return Config()


@pytest.fixture
def config(clean_env):
    """Config pointing at a test Prelude server"""
    return Config(
        prelude_url=PRELUDE_URL,
        client_id="test-client",
        client_secret="test-secret",
        log_level="DEBUG",
    )


@pytest.fixture
def store(config):
    """In-memory config store without a token"""
    return MemoryConfigStore(config)


@pytest.fixture
def authenticated_store(store):
    """In-memory config store holding a valid token"""
    store.save_access_token(make_token())
    return store


@pytest.fixture
def mock_http_client():
    """Mock httpx AsyncClient"""
    return Mock(spec=httpx.AsyncClient)


@pytest.fixture
def diagnostics_logger():
    """Mock logger standing in for the diagnostics sink"""
    return Mock()


@pytest.fixture
def client(authenticated_store, mock_http_client, diagnostics_logger):
    """PreludeClient with a valid token and mocked HTTP client"""
    return PreludeClient(
        authenticated_store,
        http_client=mock_http_client,
        diagnostics_logger=diagnostics_logger,
    )


@pytest.fixture
def unauthenticated_client(store, mock_http_client, diagnostics_logger):
    """PreludeClient whose store holds no token"""
    return PreludeClient(
        store,
        http_client=mock_http_client,
        diagnostics_logger=diagnostics_logger,
    )


@pytest.fixture
def mock_token_provider():
    """Mock token provider that always has a token"""
    provider = Mock(spec=OAuthProvider)
    provider.get_current_access_token.return_value = "mock-token"
    provider.check_access_token = AsyncMock(return_value="mock-token")
    provider.connect = AsyncMock()
    return provider
