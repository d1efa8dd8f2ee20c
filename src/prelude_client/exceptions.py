"""Prelude client custom exceptions.

Exception Design Principles:
1. Failures of the request pipeline are returned as values (see models.Err),
   not raised. Exceptions are reserved for setup and authentication problems.
2. Split on domain of actionable information:
   - Recoverable by user reconfiguration (ConfigError)
   - Recoverable by fixing credentials or the auth server (AuthenticationError)
   - Raised on demand by callers unwrapping a failed result (PreludeAPIError)
"""

from typing import Any


class PreludeError(Exception):
    """Base exception for all Prelude client errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize PreludeError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(PreludeError):
    """Application configuration errors - recoverable by user reconfiguration.

    Covers setup issues detected before any request is sent:
    - Missing or malformed credentials files
    - Missing Prelude URL or client credentials
    """

    pass


class AuthenticationError(PreludeError):
    """OAuth token exchange failed.

    Raised by the token provider when the client-credentials exchange cannot
    produce a token: unreachable token endpoint, HTTP error status, a body
    that is not JSON or that lacks ``access_token``.
    """

    pass


class PreludeAPIError(PreludeError):
    """A request to the Prelude API failed.

    Only raised when a caller explicitly unwraps a failed send result; the
    request pipeline itself never raises it.
    """

    def __init__(self, message: str, *, kind: Any, **kwargs):
        super().__init__(message, **kwargs)
        self.kind = kind
