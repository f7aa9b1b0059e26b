from __future__ import annotations

from typing import Any

import aiohttp
import pytest

from robovac_trigger.exceptions import RobovacWebhookError
from robovac_trigger.webhook import HttpWebhookInvoker


class _FakeResponse:
    def __init__(self, status: int, error: Exception | None) -> None:
        self.status = status
        self._error = error

    async def __aenter__(self) -> _FakeResponse:
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, status: int = 200, error: Exception | None = None) -> None:
        self._status = status
        self._error = error
        self.calls: list[tuple[str, Any]] = []

    def get(self, url: str, *, ssl: Any = True) -> _FakeResponse:
        self.calls.append((url, ssl))
        return _FakeResponse(self._status, self._error)


@pytest.mark.asyncio
async def test_trigger_issues_get() -> None:
    session = _FakeSession()
    invoker = HttpWebhookInvoker(session)  # type: ignore[arg-type]

    await invoker.trigger("https://ha.local/api/webhook/start")

    assert session.calls == [("https://ha.local/api/webhook/start", True)]


@pytest.mark.asyncio
async def test_trigger_skip_verify_disables_ssl_check() -> None:
    session = _FakeSession()
    invoker = HttpWebhookInvoker(session, skip_verify_ssl=True)  # type: ignore[arg-type]

    await invoker.trigger("https://ha.local/api/webhook/start")

    assert session.calls[0][1] is False


@pytest.mark.asyncio
async def test_trigger_ignores_http_status() -> None:
    session = _FakeSession(status=500)
    invoker = HttpWebhookInvoker(session)  # type: ignore[arg-type]

    await invoker.trigger("https://ha.local/api/webhook/start")


@pytest.mark.asyncio
async def test_trigger_wraps_transport_errors_with_redacted_url() -> None:
    session = _FakeSession(error=aiohttp.ClientConnectionError("connection refused"))
    invoker = HttpWebhookInvoker(session)  # type: ignore[arg-type]

    with pytest.raises(RobovacWebhookError) as exc_info:
        await invoker.trigger("https://user:pw@ha.local/api/webhook/secret-id?key=abc")

    exc = exc_info.value
    assert "secret-id" not in str(exc)
    assert "pw" not in exc.url
    assert exc.url == "https://ha.local/api/webhook/<redacted>?<redacted>"
