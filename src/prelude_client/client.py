"""Prelude client: authenticated requests against the Prelude API."""

import json
import logging
from typing import Any

import httpx

from .auth import OAuthProvider
from .consts import (
    ALERT_PATHS,
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    DEFAULT_TIMEOUT_SECONDS,
    EMBEDDED_ERROR_KEY,
    LOG_PATHS,
    RETRIEVE_ACTION,
    STATUS_ALERTS_LABEL,
    STATUS_LOGS_LABEL,
    STATUS_TOKEN_LABEL,
    USER_AGENT,
)
from .models import Err, FailureKind, Ok, ResourceKind, SendResult
from .protocols import ConfigStore, TokenProvider
from .utils import api_base_url, encode_json, merge_params, strip_empty

logger = logging.getLogger("prelude-client.client")

RESOURCE_PATHS = {
    ResourceKind.ALERTS: ALERT_PATHS,
    ResourceKind.LOGS: LOG_PATHS,
}

# http_params keys mapped to httpx request arguments, other keys pass through
HTTPX_ARGUMENTS = {
    "allow_redirects": "follow_redirects",
    "query": "params",
    "body": "content",
    "json": "json",
    "headers": "headers",
}

REDACTED_HEADERS = {"authorization"}


class PreludeClient:
    """Prelude API client with authentication.

    Responsibilities:
    - Send authenticated requests to the API base URL
    - Detect transport, HTTP status and embedded application errors
    - Retrieve alerts and logs
    - Report the health of the connection
    """

    def __init__(
        self,
        config_store: ConfigStore,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        diagnostics_logger: logging.Logger | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize PreludeClient.

        Args:
            config_store: Store providing the Prelude URL and credentials.
            token_provider: Token provider. If None, creates an OAuthProvider.
            http_client: HTTP client. If None, creates a new one owned by
                this client and closed by close().
            diagnostics_logger: Sink for failure diagnostics.
            timeout_seconds: Timeout of the HTTP client created here.
        """
        self.config_store = config_store
        self._owns_http_client = http_client is None

        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout_seconds,
            follow_redirects=False,
        )

        self.token_provider = token_provider or OAuthProvider(
            self.config_store, self.http_client
        )
        self.diagnostics_logger = diagnostics_logger or logging.getLogger(
            "prelude-client.diagnostics"
        )

    async def __aenter__(self) -> "PreludeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    # ===== RESOURCES =====

    async def get_alerts(self, params: dict[str, Any] | None = None) -> Any | None:
        """Retrieve alerts.

        Args:
            params: Overrides shallow-merged over the default parameters,
                e.g. ``{"query": {...}}`` replaces the whole default query.

        Returns:
            Decoded JSON payload, or None if the request failed.
        """
        return _decode(await self.fetch(ResourceKind.ALERTS, params))

    async def get_logs(self, params: dict[str, Any] | None = None) -> Any | None:
        """Retrieve logs.

        Args:
            params: Overrides shallow-merged over the default parameters.

        Returns:
            Decoded JSON payload, or None if the request failed.
        """
        return _decode(await self.fetch(ResourceKind.LOGS, params))

    async def fetch(
        self, resource_kind: ResourceKind | str, params: dict[str, Any] | None = None
    ) -> SendResult:
        """Retrieve a resource kind, returning the tagged send result.

        Ensures a token is available first; the ``request`` part of the
        query is sent as a JSON-encoded string.

        Raises:
            ValueError: For an unknown resource kind.
        """
        paths = RESOURCE_PATHS[ResourceKind(resource_kind)]

        await self.token_provider.check_access_token()

        default_params = {
            "query": {
                "action": RETRIEVE_ACTION,
                "request": {
                    "path": list(paths),
                    "limit": DEFAULT_LIMIT,
                    "offset": DEFAULT_OFFSET,
                },
            }
        }
        params = merge_params(default_params, params)
        query = dict(params.get("query") or {})
        if "request" in query and not isinstance(query["request"], str):
            query["request"] = encode_json(query["request"])
        params["query"] = query

        return await self.send_http_request("GET", "", params)

    # ===== SEND PRIMITIVE =====

    async def send_http_request(
        self,
        method: str = "GET",
        resource: str = "",
        http_params: dict[str, Any] | None = None,
    ) -> SendResult:
        """Send an authenticated request and check the response.

        Args:
            method: HTTP method.
            resource: Path appended to the API base URL.
            http_params: Overrides for the default parameters:
                - allow_redirects (default False)
                - query: URL parameters
                - body: raw request body
                - json: JSON request body, cannot be used with body
                - headers: replaces the default content-type and
                  Authorization headers entirely

        Returns:
            Ok with the raw response text, or Err with the failure kind.

        Raises:
            ConfigError: If the config store cannot provide the Prelude URL.
            ValueError: If both body and json are given.
        """
        url = self._request_url(resource)

        access_token = self.token_provider.get_current_access_token()
        if not access_token:
            return Err(
                kind=FailureKind.AUTHENTICATION, message="No valid access token"
            )

        default_params = {
            "allow_redirects": False,
            "query": {},
            "body": "",
            "json": "",
            "headers": {
                "content-type": "application/json",
                "Authorization": f"Bearer {access_token}",
            },
        }
        params = strip_empty(merge_params(default_params, http_params))
        if params.get("body") is not None and params.get("json") is not None:
            raise ValueError("body and json parameters are mutually exclusive")

        logger.debug(f"{method} {url}")
        try:
            response = await self.http_client.request(
                method, url, **_httpx_arguments(params)
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._log_diagnostics(
                f"Prelude API request failed: {e}",
                [_redact(params), *_dump_exchange(e)],
            )
            return Err(kind=FailureKind.TRANSPORT, message=str(e))

        status_code = response.status_code
        logger.debug(
            f"{method} {url} -> {status_code} {response.reason_phrase} "
            f"({response.http_version})"
        )

        # 400 itself is not treated as an error
        if status_code > 400:
            return Err(
                kind=FailureKind.HTTP_STATUS,
                message=f"HTTP error {status_code}",
                status_code=status_code,
            )

        text = response.text
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            self._log_diagnostics(
                f"Prelude API returned a non-JSON body: {e}",
                [_dump_response(response)],
            )
            return Err(
                kind=FailureKind.TRANSPORT,
                message="Response is not valid JSON",
                status_code=status_code,
            )

        logs = payload.get("logs") if isinstance(payload, dict) else None
        if isinstance(logs, list) and any(
            isinstance(entry, dict) and EMBEDDED_ERROR_KEY in entry for entry in logs
        ):
            self._log_diagnostics("Prelude API reported errors", logs)
            return Err(
                kind=FailureKind.APPLICATION,
                message="Prelude API reported errors",
                status_code=status_code,
            )

        logger.debug(f"{method} {url} successful")
        return Ok(text=text)

    # ===== STATUS =====

    async def status(self) -> dict[str, bool]:
        """Check all API endpoints.

        Returns:
            Mapping of label to whether that part works.
        """
        token = self.token_provider.get_current_access_token()
        alerts = await self.get_alerts()
        logs = await self.get_logs()
        return {
            STATUS_TOKEN_LABEL: isinstance(token, str) and bool(token),
            STATUS_ALERTS_LABEL: isinstance(alerts, (dict, list)),
            STATUS_LOGS_LABEL: isinstance(logs, (dict, list)),
        }

    async def global_status(self) -> bool:
        """True if every endpoint checked by status() succeeds."""
        return False not in (await self.status()).values()

    def _request_url(self, resource: str) -> str:
        base_url = api_base_url(self.config_store.get_config()["prelude_url"])
        if resource:
            return f"{base_url}/{resource.lstrip('/')}"
        return base_url

    def _log_diagnostics(self, message: str, diagnostics: Any) -> None:
        self.diagnostics_logger.warning(message, extra={"diagnostics": diagnostics})


def _decode(result: SendResult) -> Any | None:
    if not result.ok:
        return None
    return json.loads(result.text)


def _httpx_arguments(params: dict[str, Any]) -> dict[str, Any]:
    return {HTTPX_ARGUMENTS.get(key, key): value for key, value in params.items()}


def _redact(params: dict[str, Any]) -> dict[str, Any]:
    headers = params.get("headers")
    if not isinstance(headers, dict):
        return params
    return {
        **params,
        "headers": {
            name: "<redacted>" if name.lower() in REDACTED_HEADERS else value
            for name, value in headers.items()
        },
    }


def _dump_headers(headers: httpx.Headers) -> list[str]:
    return [
        f"{name}: {'<redacted>' if name.lower() in REDACTED_HEADERS else value}"
        for name, value in headers.items()
    ]


def _dump_request(request: httpx.Request) -> str:
    lines = [f"{request.method} {request.url}", *_dump_headers(request.headers)]
    return "\n".join(lines)


def _dump_response(response: httpx.Response) -> str:
    lines = [
        f"{response.http_version} {response.status_code} {response.reason_phrase}",
        *_dump_headers(response.headers),
    ]
    try:
        lines.extend(["", response.text])
    except httpx.ResponseNotRead:
        pass
    return "\n".join(lines)


def _dump_exchange(error: Exception) -> list[str]:
    """Dump the request and, if available, the response of a failed call."""
    dumps = []
    if isinstance(error, httpx.HTTPError):
        try:
            dumps.append(_dump_request(error.request))
        except RuntimeError:
            # httpx raises when the exception was created without a request
            pass
    response = getattr(error, "response", None)
    if response is not None:
        dumps.append(_dump_response(response))
    return dumps
