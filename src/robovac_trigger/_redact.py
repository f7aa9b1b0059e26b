"""Helpers for safe debug logging.

Webhook URLs frequently embed secrets (Home Assistant webhook ids, API
keys in query strings, ``user:pass@`` credentials) and the InfluxDB
section carries a token and password. These helpers strip them before
anything reaches a log line or an exception message.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit, urlunsplit

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "webhook_start",
        "webhook_stop",
    }
)

_REDACTED = "<redacted>"


def redact_url(url: str) -> str:
    """Return *url* with credentials, query string and fragment removed.

    The last path segment is also masked since webhook ids usually live
    there.
    """
    if not url:
        return url
    parts = urlsplit(url)
    # netloc keeps IPv6 brackets and an unparsed port; drop only the credentials
    host = parts.netloc.rpartition("@")[2]
    path = parts.path
    if path.strip("/"):
        head, _, _tail = path.rstrip("/").rpartition("/")
        path = f"{head}/{_REDACTED}"
    query = _REDACTED if parts.query else ""
    return urlunsplit((parts.scheme, host, path, query, ""))


def redact_for_log(value: Any, *, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs.

    Dataclass instances (such as the configuration objects) are turned
    into dicts first.
    """
    if _depth > 10:
        return "<max-depth>"

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_KEYS:
                if key.lower().startswith("webhook"):
                    redacted[key] = redact_url(str(v))
                else:
                    redacted[key] = _REDACTED if v else v
            else:
                redacted[key] = redact_for_log(v, _depth=_depth + 1)
        return redacted

    return value
