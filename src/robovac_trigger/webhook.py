"""Webhook calls that start and stop the vacuum."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from robovac_trigger._redact import redact_url
from robovac_trigger.exceptions import RobovacWebhookError

_logger = logging.getLogger(__name__)


class WebhookInvoker(Protocol):
    """Structural interface for triggering a webhook by URL."""

    async def trigger(self, url: str) -> None:
        ...


class HttpWebhookInvoker:
    """Plain ``GET`` webhook invoker.

    The response body is ignored and the status code is only logged:
    a webhook counts as delivered once the request completes at the
    transport level.
    """

    def __init__(self, http_session: aiohttp.ClientSession, *, skip_verify_ssl: bool = False) -> None:
        self._http = http_session
        self._ssl: bool = not skip_verify_ssl

    async def trigger(self, url: str) -> None:
        safe_url = redact_url(url)
        _logger.debug("GET %s", safe_url)
        try:
            async with self._http.get(url, ssl=self._ssl) as resp:
                _logger.debug("Webhook response status=%d url=%s", resp.status, safe_url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RobovacWebhookError(f"Request to {safe_url} failed: {exc}", url=safe_url) from exc
