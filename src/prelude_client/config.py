"""Configuration management."""

import logging
from functools import cache

from pydantic import ConfigDict, Field, computed_field
from pydantic_settings import BaseSettings

from .utils import api_base_url, token_endpoint_url


class Config(BaseSettings):
    """Configuration with computed API endpoints."""

    model_config = ConfigDict(
        env_prefix="PRELUDE_", case_sensitive=False, extra="ignore"
    )
    prelude_url: str = Field(
        default="http://localhost",
        description="Base URL of the Prelude server",
    )
    client_id: str = Field(default="", description="OAuth client identifier")
    client_secret: str = Field(default="", description="OAuth client secret")
    token_url: str | None = Field(
        default=None,
        description="OAuth token endpoint, derived from prelude_url when unset",
    )
    credentials_file: str | None = Field(
        default=None,
        description="Optional JSON file holding client_id and client_secret",
    )
    token_file: str = Field(
        default="~/.prelude_client/token.json",
        description="Where FileConfigStore persists the current access token",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    timeout_seconds: int = Field(
        default=30, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    @computed_field
    @property
    def api_url(self) -> str:
        """Base URL for API calls."""
        return api_base_url(self.prelude_url)

    @computed_field
    @property
    def resolved_token_url(self) -> str:
        """URL of the OAuth token endpoint."""
        return self.token_url or token_endpoint_url(self.prelude_url)


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application"""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing configuration
    )
    return logging.getLogger("prelude-client")


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()
