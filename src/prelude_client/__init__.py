"""Prelude API client package

An OAuth-authenticated client for the Prelude security-event API, retrieving
alerts and logs with uniform handling of transport and API errors.
"""

from .auth import OAuthProvider
from .client import PreludeClient
from .config import Config, get_config
from .consts import PACKAGE_VERSION
from .exceptions import (
    AuthenticationError,
    ConfigError,
    PreludeAPIError,
    PreludeError,
)
from .models import AccessToken, Err, FailureKind, Ok, ResourceKind, SendResult
from .store import FileConfigStore, MemoryConfigStore

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "Config",
    "PreludeClient",
    "OAuthProvider",
    "MemoryConfigStore",
    "FileConfigStore",
    "AccessToken",
    "FailureKind",
    "ResourceKind",
    "Ok",
    "Err",
    "SendResult",
    "PreludeError",
    "ConfigError",
    "AuthenticationError",
    "PreludeAPIError",
]
