"""Precipitation decision engine.

Pure function from a :class:`DecisionInput` to a :class:`Decision`.
Nothing here performs I/O or logs; the caller dispatches webhooks and
reports the reason.

Comparisons are exact against ``0.0``: the queried maximum is ``0.0``
when no precipitation was recorded, and any positive value, however
small, counts as precipitation.
"""

from __future__ import annotations

from robovac_trigger.models.decision import Action, Decision, DecisionInput, DecisionKind

REASON_DRY = "no precipitation in past or forecast"
REASON_PAST_AND_FUTURE = "precipitation found both in past and future"
REASON_PAST = "precipitation found in past weather"
REASON_FUTURE = "precipitation found in future forecast"
REASON_FORECAST_DRY = "forecast is dry"
REASON_NEGATIVE = "negative precipitation reading"


def _start_decision(past: float, future: float) -> tuple[DecisionKind, str]:
    if past < 0.0 or future < 0.0:
        return DecisionKind.NO_OP, REASON_NEGATIVE
    if past == 0.0 and future == 0.0:
        return DecisionKind.START_VACUUM, REASON_DRY
    if past > 0.0 and future > 0.0:
        return DecisionKind.NO_OP, REASON_PAST_AND_FUTURE
    if past > 0.0:
        return DecisionKind.NO_OP, REASON_PAST
    return DecisionKind.NO_OP, REASON_FUTURE


def _stop_decision(future: float) -> tuple[DecisionKind, str]:
    if future > 0.0:
        return DecisionKind.STOP_VACUUM, REASON_FUTURE
    return DecisionKind.NO_OP, REASON_FORECAST_DRY


def decide(decision_input: DecisionInput) -> Decision:
    """Choose exactly one action for *decision_input*.

    ``start`` mode starts the vacuum only when both the lookback and the
    lookforward maxima are exactly zero. ``stop`` mode stops it whenever
    the forecast maximum is positive.
    """
    future = decision_input.future_precipitation
    if decision_input.mode is Action.START:
        past = decision_input.past_precipitation
        assert past is not None  # noqa: S101
        kind, reason = _start_decision(past, future)
    else:
        kind, reason = _stop_decision(future)

    return Decision(
        kind=kind,
        mode=decision_input.mode,
        reason=reason,
        past_precipitation=decision_input.past_precipitation,
        future_precipitation=future,
    )
