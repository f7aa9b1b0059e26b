"""Run orchestration: query, decide, dispatch."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from robovac_trigger._redact import redact_for_log
from robovac_trigger.config import RobovacConfig
from robovac_trigger.engine import decide
from robovac_trigger.exceptions import RobovacConfigValidationError, RobovacError
from robovac_trigger.models.decision import Action, Decision, DecisionInput, DecisionKind
from robovac_trigger.query import ForecastQueryProvider, InfluxQueryProvider, TimeRange
from robovac_trigger.webhook import HttpWebhookInvoker, WebhookInvoker

_logger = logging.getLogger(__name__)


class RobovacTrigger:
    """Decides whether to start or stop the vacuum and fires the webhook.

    Usage::

        async with RobovacTrigger(config) as trigger:
            decision = await trigger.run(Action.START)

    The query provider and webhook invoker can be injected; anything not
    injected is created on enter and closed on exit.
    """

    def __init__(
        self,
        config: RobovacConfig,
        *,
        query_provider: ForecastQueryProvider | None = None,
        webhook_invoker: WebhookInvoker | None = None,
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._query_provider = query_provider
        self._webhook_invoker = webhook_invoker
        self._http_session = http_session
        self._owned_provider: InfluxQueryProvider | None = None
        self._owned_session: aiohttp.ClientSession | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RobovacTrigger:
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Configuration %s", redact_for_log(self._config))
        if self._query_provider is None:
            self._owned_provider = InfluxQueryProvider(self._config.influxdb)
            await self._owned_provider.connect()
            self._query_provider = self._owned_provider
        if self._webhook_invoker is None:
            if self._http_session is None:
                self._owned_session = aiohttp.ClientSession()
                self._http_session = self._owned_session
            self._webhook_invoker = HttpWebhookInvoker(
                self._http_session,
                skip_verify_ssl=self._config.vacuum.skip_verify_ssl,
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._owned_provider is not None:
            await self._owned_provider.close()
            self._owned_provider = None
            self._query_provider = None
        if self._owned_session is not None:
            await self._owned_session.close()
            self._owned_session = None
            self._http_session = None
            self._webhook_invoker = None

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _require_collaborators(self) -> tuple[ForecastQueryProvider, WebhookInvoker]:
        if self._query_provider is None or self._webhook_invoker is None:
            raise RobovacError("Trigger not initialized. Use 'async with RobovacTrigger(...) as trigger:'")
        return self._query_provider, self._webhook_invoker

    async def fetch_input(self, action: Action) -> DecisionInput:
        """Query the precipitation maxima *action* needs."""
        provider, _ = self._require_collaborators()
        influx = self._config.influxdb
        query = self._config.query
        bucket = influx.resolve_bucket()

        past: float | None = None
        if action is Action.START:
            if not query.lookback_duration:
                raise RobovacConfigValidationError("query.lookbackDuration is required for action start")
            past = await provider.query_max(
                bucket,
                influx.measurement,
                influx.field,
                TimeRange.lookback(query.lookback_duration),
            )

        if not query.lookforward_duration:
            raise RobovacConfigValidationError("query.lookforwardDuration is required")
        future = await provider.query_max(
            bucket,
            influx.measurement,
            influx.field,
            TimeRange.lookforward(query.lookforward_duration),
        )
        return DecisionInput(past_precipitation=past, future_precipitation=future, mode=action)

    async def dispatch(self, decision: Decision) -> None:
        """Fire the webhook *decision* calls for and log the outcome."""
        _, invoker = self._require_collaborators()
        lookback = self._config.query.lookback_duration
        lookforward = self._config.query.lookforward_duration

        if decision.kind is DecisionKind.START_VACUUM:
            url = self._config.vacuum.webhook_start
            if not url:
                raise RobovacConfigValidationError("vacuum.webhookStart is not configured")
            await invoker.trigger(url)
            _logger.info(
                "Started robot vacuum: %s op=dispatch lookbackDuration=%s lookforwardDuration=%s",
                decision.reason,
                lookback,
                lookforward,
            )
        elif decision.kind is DecisionKind.STOP_VACUUM:
            url = self._config.vacuum.webhook_stop
            if not url:
                raise RobovacConfigValidationError("vacuum.webhookStop is not configured")
            await invoker.trigger(url)
            _logger.info(
                "Stopped robot vacuum: %s op=dispatch lookforwardDuration=%s",
                decision.reason,
                lookforward,
            )
        elif decision.mode is Action.START:
            _logger.info(
                "Not starting robot vacuum: %s op=dispatch lookbackDuration=%s lookforwardDuration=%s",
                decision.reason,
                lookback,
                lookforward,
            )
        else:
            _logger.info(
                "Not stopping robot vacuum: %s op=dispatch lookforwardDuration=%s",
                decision.reason,
                lookforward,
            )

    async def run(self, action: Action | str) -> Decision:
        """Query, decide and dispatch once for *action*."""
        try:
            action = Action(action)
        except ValueError as exc:
            raise RobovacConfigValidationError("CLI parameter action must be either start or stop") from exc

        decision_input = await self.fetch_input(action)
        decision = decide(decision_input)
        _logger.debug(
            "Decision kind=%s past=%s future=%s",
            decision.kind,
            decision.past_precipitation,
            decision.future_precipitation,
        )
        await self.dispatch(decision)
        return decision
