"""Authentication management with token refresh."""

import logging
from typing import Any

import httpx

from .exceptions import AuthenticationError
from .models import AccessToken
from .protocols import ConfigStore
from .utils import merge_params, token_endpoint_url

logger = logging.getLogger("prelude-client.auth")


class OAuthProvider:
    """OAuth client-credentials token provider.

    Responsibilities:
    - Exchange client credentials for a bearer token
    - Store the token in the config store
    - Refresh the token only when it is absent or expired
    """

    def __init__(self, config_store: ConfigStore, http_client: httpx.AsyncClient):
        """Initialize OAuthProvider.

        Args:
            config_store: Store providing credentials and caching the token.
            http_client: HTTP client (for token requests only)
        """
        self.config_store = config_store
        self.http_client = http_client

    async def connect(self, params: dict[str, Any] | None = None) -> AccessToken:
        """Perform the client-credentials exchange.

        Args:
            params: Overrides for the stored credentials (``client_id``,
                ``client_secret``, ``prelude_url``, ``token_url``, ``scope``).

        Returns:
            The new token, already saved into the config store.

        Raises:
            ConfigError: If the config store cannot provide its values.
            AuthenticationError: If the exchange fails for any reason.
        """
        credentials = merge_params(self.config_store.get_config(), params)
        token_url = credentials.get("token_url") or token_endpoint_url(
            credentials.get("prelude_url") or ""
        )

        if not credentials.get("client_id") or not credentials.get("client_secret"):
            raise AuthenticationError(
                "Missing OAuth client credentials",
                suggestions=["Set PRELUDE_CLIENT_ID and PRELUDE_CLIENT_SECRET"],
                context={"token_url": token_url},
            )

        form = {
            "grant_type": "client_credentials",
            "client_id": credentials["client_id"],
            "client_secret": credentials["client_secret"],
        }
        if credentials.get("scope"):
            form["scope"] = credentials["scope"]

        logger.debug(f"Requesting access token from {token_url}")

        try:
            response = await self.http_client.post(
                token_url, data=form, headers={"Accept": "application/json"}
            )
            response.raise_for_status()
            token_data = response.json()
            if not isinstance(token_data, dict):
                raise ValueError(
                    f"expected a JSON object, got {type(token_data).__name__}"
                )
            token = AccessToken.from_token_response(token_data)

        except httpx.HTTPStatusError as e:
            logger.error(f"Token endpoint returned {e.response.status_code}")
            raise AuthenticationError(
                "Token endpoint rejected the client credentials",
                errors=[str(e)],
                suggestions=["Check the OAuth client id and secret"],
                context={
                    "token_url": token_url,
                    "status_code": e.response.status_code,
                },
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Token request failed: {e}")
            raise AuthenticationError(
                "Could not reach the token endpoint",
                errors=[str(e)],
                suggestions=["Check the Prelude URL and network connectivity"],
                context={"token_url": token_url},
            ) from e
        except KeyError as e:
            logger.error("Missing access_token in response")
            raise AuthenticationError(
                "Token endpoint returned response without access_token",
                errors=[f"Missing required field: {e}"],
                context={"token_url": token_url},
            ) from e
        except (ValueError, TypeError, OverflowError) as e:
            # non-JSON or non-object body, or a token that does not validate
            logger.error(f"Invalid token response: {e}")
            raise AuthenticationError(
                "Token endpoint returned an invalid response",
                errors=[str(e)],
                context={"token_url": token_url},
            ) from e

        self.config_store.save_access_token(token)
        logger.info("Access token obtained")
        return token

    def get_current_access_token(self) -> str | None:
        """Get the cached bearer string if present and not expired."""
        return self.config_store.get_current_access_token()

    async def check_access_token(self) -> str | None:
        """Get a valid token, connecting once when there is none.

        An authentication failure is logged and reported as no token; the
        exchange is not retried.

        Returns:
            Bearer string, or None if no token could be obtained.
        """
        token = self.get_current_access_token()
        if token:
            return token

        logger.debug("No valid access token, connecting")
        try:
            return (await self.connect()).value
        except AuthenticationError as e:
            logger.error(f"Authentication failed: {e.message}")
            return None
