"""Protocol definitions for dependency injection and interface contracts."""

from typing import Any, Protocol

from .models import AccessToken


class ConfigStore(Protocol):
    """Key-value configuration provider owning credentials and the token."""

    def get_config(self) -> dict[str, Any]:
        """Get configuration values.

        Returns:
            Mapping with at least ``prelude_url``, ``client_id`` and
            ``client_secret``.

        Raises:
            ConfigError: If the configuration cannot be loaded.
        """
        ...

    def get_current_access_token(self) -> str | None:
        """Get the cached bearer string, or None if absent or expired."""
        ...

    def save_access_token(self, token: AccessToken) -> None:
        """Replace the cached token."""
        ...


class TokenProvider(Protocol):
    """Protocol for authentication token providers."""

    async def connect(self, params: dict[str, Any] | None = None) -> AccessToken:
        """Perform the token exchange and store the new token.

        Raises:
            AuthenticationError: If no token can be obtained.
        """
        ...

    def get_current_access_token(self) -> str | None:
        """Get the current token without refreshing it."""
        ...

    async def check_access_token(self) -> str | None:
        """Get the current token, connecting first when there is none."""
        ...
