"""Helpers for request parameters and URLs."""

import json
from typing import Any

from .consts import API_URL_SUFFIX, TOKEN_URL_PATH


def api_base_url(prelude_url: str) -> str:
    """Build the API base URL: the configured URL without surrounding
    slashes, followed by ``/api``.
    """
    return f"{prelude_url.strip('/')}{API_URL_SUFFIX}"


def merge_params(
    defaults: dict[str, Any], overrides: dict[str, Any] | None
) -> dict[str, Any]:
    """Shallow-merge overrides over defaults.

    Only top-level keys are considered: an override value replaces the
    default value for the same key entirely, nested mappings are not
    combined. Neither input is mutated.

    Args:
        defaults: Default parameters.
        overrides: Caller parameters, may be None.

    Returns:
        New dict with the merged parameters.
    """
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged


def strip_empty(params: dict[str, Any]) -> dict[str, Any]:
    """Drop parameters whose value is exactly the empty string.

    Other falsy values (False, 0, {}, None) are kept.
    """
    return {
        key: value
        for key, value in params.items()
        if not (isinstance(value, str) and value == "")
    }


def encode_json(value: Any) -> str:
    """Compact JSON encoding, as expected by the Prelude ``request`` param."""
    return json.dumps(value, separators=(",", ":"))


def token_endpoint_url(prelude_url: str) -> str:
    """Default OAuth token endpoint for a Prelude server."""
    return f"{prelude_url.strip('/')}{TOKEN_URL_PATH}"
