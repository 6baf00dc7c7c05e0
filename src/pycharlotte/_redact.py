"""Helpers for safe logging.

The destination URI carries the boat's API key as a query parameter and the
host option set carries it in clear text. Both go through these helpers
before they reach a log record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SENSITIVE_KEYS: frozenset[str] = frozenset({"apikey", "api_key"})

_PLACEHOLDER = "<redacted>"


def _is_sensitive(key: Any) -> bool:
    return str(key).lower() in _SENSITIVE_KEYS


def redact_url(url: str) -> str:
    """Return *url* with the API key query parameter masked."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, _PLACEHOLDER if _is_sensitive(key) else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query, safe="<>")))


def redact_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of a host option set with the API key masked."""
    return {key: _PLACEHOLDER if _is_sensitive(key) else value for key, value in options.items()}
