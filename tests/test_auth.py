"""Tests for OAuthProvider token lifecycle"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from prelude_client.auth import OAuthProvider
from prelude_client.exceptions import AuthenticationError

from .conftest import TOKEN_URL, make_response, make_token


def token_response(payload, status_code=200):
    return make_response(status_code, payload, url=TOKEN_URL, method="POST")


class TestOAuthProvider:
    """Test the client-credentials exchange and token caching"""

    @pytest.fixture
    def provider(self, store, mock_http_client):
        """OAuthProvider over an empty in-memory store"""
        return OAuthProvider(store, mock_http_client)

    @pytest.mark.asyncio
    async def test_connect_success(self, provider, store, mock_http_client):
        """Test a successful exchange stores and returns the token"""
        mock_http_client.post = AsyncMock(
            return_value=token_response(
                {"access_token": "abc", "token_type": "bearer", "expires_in": 600}
            )
        )

        before = datetime.now(UTC)
        token = await provider.connect()

        assert token.value == "abc"
        assert token.token_type == "bearer"
        assert before + timedelta(seconds=600) <= token.expires_at
        assert store.get_current_access_token() == "abc"

        args, kwargs = mock_http_client.post.call_args
        assert args == (TOKEN_URL,)
        assert kwargs["data"] == {
            "grant_type": "client_credentials",
            "client_id": "test-client",
            "client_secret": "test-secret",
        }

    @pytest.mark.asyncio
    async def test_connect_with_overrides(self, provider, mock_http_client):
        """Test caller params override the stored credentials"""
        mock_http_client.post = AsyncMock(
            return_value=token_response({"access_token": "abc"})
        )

        await provider.connect(
            {
                "client_id": "other",
                "token_url": "https://auth.test/token",
                "scope": "read",
            }
        )

        args, kwargs = mock_http_client.post.call_args
        assert args == ("https://auth.test/token",)
        assert kwargs["data"]["client_id"] == "other"
        assert kwargs["data"]["client_secret"] == "test-secret"
        assert kwargs["data"]["scope"] == "read"

    @pytest.mark.asyncio
    async def test_prelude_url_override_moves_token_url(
        self, provider, mock_http_client
    ):
        """Test the derived token URL follows an overridden Prelude URL"""
        mock_http_client.post = AsyncMock(
            return_value=token_response({"access_token": "abc"})
        )

        await provider.connect({"prelude_url": "https://other.test/"})

        assert mock_http_client.post.call_args.args == (
            "https://other.test/oauth/token",
        )

    @pytest.mark.parametrize(
        "error_setup",
        [
            {"exception": httpx.ConnectError("Connection refused")},
            {"exception": httpx.ReadTimeout("timed out")},
            {"response": token_response({"error": "invalid_client"}, 401)},
            {"response": token_response({"error": "server_error"}, 500)},
            {"response": token_response({"token_type": "bearer"})},
            {"response": token_response({"access_token": ""})},
            {"response": make_response(200, text="not json", url=TOKEN_URL)},
            {"response": token_response([])},
            {"response": make_response(200, text="\"x\"", url=TOKEN_URL)},
            {"response": make_response(200, text="null", url=TOKEN_URL)},
            {"response": token_response({"access_token": "abc", "expires_in": 10**15})},
            {"response": token_response({"access_token": "abc", "expires_in": [1]})},
        ],
    )
    @pytest.mark.asyncio
    async def test_connect_failures(
        self, provider, store, mock_http_client, error_setup
    ):
        """Test every failed exchange raises AuthenticationError"""
        if "exception" in error_setup:
            mock_http_client.post = AsyncMock(side_effect=error_setup["exception"])
        else:
            mock_http_client.post = AsyncMock(return_value=error_setup["response"])

        with pytest.raises(AuthenticationError):
            await provider.connect()

        assert store.get_current_access_token() is None
        mock_http_client.post.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_without_credentials(self, config, mock_http_client):
        """Test missing credentials fail before any request"""
        from prelude_client.store import MemoryConfigStore

        store = MemoryConfigStore(config.model_copy(update={"client_secret": ""}))
        provider = OAuthProvider(store, mock_http_client)
        mock_http_client.post = AsyncMock()

        with pytest.raises(AuthenticationError) as exc_info:
            await provider.connect()

        assert exc_info.value.context == {"token_url": TOKEN_URL}
        mock_http_client.post.assert_not_called()

    def test_get_current_access_token_is_a_query(self, provider, store):
        """Test reading the token never connects or raises"""
        assert provider.get_current_access_token() is None

        store.save_access_token(make_token("cached"))
        assert provider.get_current_access_token() == "cached"

    def test_expired_token_is_absent(self, provider, store):
        """Test an expired token reads as no token"""
        store.save_access_token(make_token("old", expires_in=-1))

        assert provider.get_current_access_token() is None

    @pytest.mark.asyncio
    async def test_check_uses_cached_token(self, provider, store, mock_http_client):
        """Test a valid cached token is not refreshed"""
        store.save_access_token(make_token("cached"))
        mock_http_client.post = AsyncMock()

        assert await provider.check_access_token() == "cached"
        mock_http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_refreshes_expired_token(
        self, provider, store, mock_http_client
    ):
        """Test an expired token triggers exactly one exchange"""
        store.save_access_token(make_token("old", expires_in=-1))
        mock_http_client.post = AsyncMock(
            return_value=token_response({"access_token": "new"})
        )

        assert await provider.check_access_token() == "new"
        assert provider.get_current_access_token() == "new"
        mock_http_client.post.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_check_reports_failure_as_no_token(
        self, provider, mock_http_client
    ):
        """Test a failed exchange is not retried and yields no token"""
        mock_http_client.post = AsyncMock(
            return_value=token_response({"error": "invalid_client"}, 401)
        )

        assert await provider.check_access_token() is None
        assert provider.get_current_access_token() is None
        mock_http_client.post.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_with_malformed_url(self, config):
        """Test an unparseable token URL is an authentication failure"""
        from prelude_client.store import MemoryConfigStore

        store = MemoryConfigStore(
            config.model_copy(update={"prelude_url": "http://host:notaport/"})
        )
        async with httpx.AsyncClient() as http_client:
            provider = OAuthProvider(store, http_client)

            with pytest.raises(AuthenticationError):
                await provider.connect()

            assert await provider.check_access_token() is None

    @pytest.mark.asyncio
    async def test_check_with_non_object_token_response(
        self, provider, mock_http_client
    ):
        """Test a JSON array from the token endpoint yields no token"""
        mock_http_client.post = AsyncMock(return_value=token_response([]))

        assert await provider.check_access_token() is None
        mock_http_client.post.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_zero_expires_in(self, provider, mock_http_client):
        """Test expires_in of 0 gives an already expired token"""
        mock_http_client.post = AsyncMock(
            return_value=token_response({"access_token": "abc", "expires_in": 0})
        )

        token = await provider.connect()

        assert token.expires_at <= datetime.now(UTC)
        assert provider.get_current_access_token() is None
