"""Decision engine input and output models.

A :class:`DecisionInput` is built from the two precipitation maxima
returned by the query provider; :func:`robovac_trigger.engine.decide`
turns it into exactly one :class:`Decision`.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, model_validator


class Action(enum.StrEnum):
    """What the scheduled run was asked to consider."""

    START = "start"
    STOP = "stop"


class DecisionKind(enum.StrEnum):
    """Outcome of a decision."""

    START_VACUUM = "start_vacuum"
    STOP_VACUUM = "stop_vacuum"
    NO_OP = "no_op"


class DecisionInput(BaseModel):
    """Precipitation maxima for one run.

    Parameters
    ----------
    past_precipitation : float or None
        Maximum over the lookback window. Only present in ``start`` mode.
    future_precipitation : float
        Maximum over the lookforward window.
    mode : Action
        Whether the run may start or stop the vacuum.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    past_precipitation: float | None = None
    future_precipitation: float
    mode: Action

    @model_validator(mode="after")
    def _past_only_when_starting(self) -> DecisionInput:
        if self.mode is Action.START and self.past_precipitation is None:
            raise ValueError("past_precipitation is required when mode is start")
        if self.mode is Action.STOP and self.past_precipitation is not None:
            raise ValueError("past_precipitation must not be set when mode is stop")
        return self


class Decision(BaseModel):
    """What to do, and why."""

    model_config = ConfigDict(frozen=True)

    kind: DecisionKind
    mode: Action
    reason: str
    past_precipitation: float | None = None
    future_precipitation: float

    @property
    def is_noop(self) -> bool:
        return self.kind is DecisionKind.NO_OP
