"""Data models: access tokens and send results."""

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .consts import DEFAULT_TOKEN_EXPIRY_SECONDS
from .exceptions import PreludeAPIError

# =============================================================================
# ACCESS TOKEN
# =============================================================================


class AccessToken(BaseModel):
    """Bearer token obtained from the OAuth client-credentials exchange.

    Tokens are never modified; a refresh replaces the whole object.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1, description="Opaque bearer string")
    token_type: str = Field("Bearer", description="Token type from the server")
    expires_at: datetime = Field(..., description="UTC expiry timestamp")

    @classmethod
    def from_token_response(
        cls, data: dict[str, Any], now: datetime | None = None
    ) -> "AccessToken":
        """Build a token from an OAuth token endpoint response body.

        Args:
            data: Decoded JSON body containing ``access_token`` and
                optionally ``expires_in`` and ``token_type``.
            now: Reference time, defaults to the current UTC time.

        Raises:
            KeyError: If ``access_token`` is missing.
        """
        now = now or datetime.now(UTC)
        expires_in = data.get("expires_in")
        if expires_in is None:
            expires_in = DEFAULT_TOKEN_EXPIRY_SECONDS
        return cls(
            value=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            expires_at=now + timedelta(seconds=int(expires_in)),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token is past its expiry."""
        return (now or datetime.now(UTC)) >= self.expires_at


# =============================================================================
# SEND RESULT
# =============================================================================
# Tagged result returned by the send primitive: Ok(text) | Err(kind)


class FailureKind(StrEnum):
    """Why a request to the Prelude API failed."""

    AUTHENTICATION = "authentication"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    APPLICATION = "application"


class Ok(BaseModel):
    """Successful request carrying the raw, validated response text."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    text: str

    def unwrap(self) -> str:
        return self.text


class Err(BaseModel):
    """Failed request. Carries no payload, only the failure class."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    kind: FailureKind
    message: str = ""
    status_code: int | None = None

    def unwrap(self) -> str:
        """Raise the failure as a PreludeAPIError."""
        context = {"status_code": self.status_code} if self.status_code else {}
        raise PreludeAPIError(
            self.message or f"Prelude API request failed ({self.kind})",
            kind=self.kind,
            context=context,
        )


SendResult = Ok | Err


class ResourceKind(StrEnum):
    """Resource types served by the Prelude retrieve action."""

    ALERTS = "alerts"
    LOGS = "logs"
