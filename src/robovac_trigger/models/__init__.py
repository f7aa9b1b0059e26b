"""Data models for robovac_trigger."""

from robovac_trigger.models.decision import Action, Decision, DecisionInput, DecisionKind

__all__ = [
    "Action",
    "Decision",
    "DecisionInput",
    "DecisionKind",
]
