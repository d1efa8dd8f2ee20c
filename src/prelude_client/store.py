"""ConfigStore implementations: credentials and access-token persistence."""

import json
import logging
import os
import stat
from pathlib import Path
from typing import Any

from .config import Config
from .exceptions import ConfigError
from .models import AccessToken

logger = logging.getLogger("prelude-client.store")


class MemoryConfigStore:
    """ConfigStore keeping the current token in memory.

    Credentials come from a Config instance.
    """

    def __init__(self, config: Config):
        self.config = config
        self._token: AccessToken | None = None

    def get_config(self) -> dict[str, Any]:
        """Get credentials and endpoints.

        Raises:
            ConfigError: If no Prelude URL is configured.
        """
        values = {
            "prelude_url": self.config.prelude_url,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "token_url": self.config.token_url,
        }
        if not values["prelude_url"]:
            raise ConfigError(
                "Prelude URL is not configured",
                suggestions=["Set PRELUDE_PRELUDE_URL to the Prelude server URL"],
            )
        return values

    def get_current_access_token(self) -> str | None:
        token = self._load_token()
        if token is None or token.is_expired():
            return None
        return token.value

    def save_access_token(self, token: AccessToken) -> None:
        self._token = token
        logger.debug(f"Stored access token expiring at {token.expires_at}")

    def _load_token(self) -> AccessToken | None:
        return self._token


class FileConfigStore(MemoryConfigStore):
    """ConfigStore persisting the current token to a JSON file.

    Credentials may also be read from the JSON ``credentials_file`` named in
    the config; its values take precedence over settings. The token file is
    chmod 0600 (owner-only read/write).
    """

    def __init__(self, config: Config, token_file: str | os.PathLike | None = None):
        super().__init__(config)
        self.token_path = Path(token_file or config.token_file).expanduser()
        self._loaded = False

    def get_config(self) -> dict[str, Any]:
        values = super().get_config()
        if self.config.credentials_file:
            credentials = self._load_credentials()
            values.update(
                {
                    key: credentials[key]
                    for key in ("client_id", "client_secret", "prelude_url")
                    if credentials.get(key)
                }
            )
        return values

    def save_access_token(self, token: AccessToken) -> None:
        super().save_access_token(token)
        self._loaded = True
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(token.model_dump_json(indent=2))
        os.chmod(self.token_path, stat.S_IRUSR | stat.S_IWUSR)
        logger.info(f"Saved access token to {self.token_path}")

    def _load_token(self) -> AccessToken | None:
        if not self._loaded:
            self._loaded = True
            self._token = self._read_token_file()
        return self._token

    def _read_token_file(self) -> AccessToken | None:
        if not self.token_path.exists():
            return None

        try:
            return AccessToken.model_validate_json(self.token_path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.token_path}: {e}")
            return None

    def _load_credentials(self) -> dict[str, Any]:
        """Load credentials from the configured JSON file."""
        logger.debug(f"Loading credentials from {self.config.credentials_file}")

        try:
            credentials_path = os.path.expanduser(self.config.credentials_file)
            with open(credentials_path) as f:
                credentials = json.load(f)
        except (FileNotFoundError, PermissionError) as e:
            raise ConfigError(
                f"Credentials file not found: {self.config.credentials_file}",
                suggestions=[
                    f"Create credentials file at {self.config.credentials_file}",
                    "Check file permissions",
                ],
                context={"credentials_path": self.config.credentials_file},
            ) from e
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in credentials file: {self.config.credentials_file}",
                errors=[f"JSON error: {e.msg}"],
                suggestions=["Fix JSON syntax in credentials file"],
                context={"credentials_path": self.config.credentials_file},
            ) from e

        if not isinstance(credentials, dict):
            raise ConfigError(
                "Credentials file must hold a JSON object: "
                f"{self.config.credentials_file}",
                context={"credentials_path": self.config.credentials_file},
            )
        return credentials
