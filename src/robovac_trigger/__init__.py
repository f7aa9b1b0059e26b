"""robovac_trigger - Precipitation-aware start/stop trigger for an outdoor robot vacuum."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("outdoor-robovac-trigger")
except PackageNotFoundError:
    __version__ = "0+local"
from robovac_trigger.config import InfluxDBConfig, QueryConfig, RobovacConfig, VacuumConfig, load_configuration
from robovac_trigger.engine import decide
from robovac_trigger.exceptions import (
    RobovacConfigError,
    RobovacConfigValidationError,
    RobovacConnectionError,
    RobovacError,
    RobovacQueryError,
    RobovacWebhookError,
)
from robovac_trigger.models import Action, Decision, DecisionInput, DecisionKind
from robovac_trigger.query import ForecastQueryProvider, InfluxQueryProvider, TimeRange
from robovac_trigger.trigger import RobovacTrigger
from robovac_trigger.webhook import HttpWebhookInvoker, WebhookInvoker

__all__ = [
    "__version__",
    "Action",
    "Decision",
    "DecisionInput",
    "DecisionKind",
    "ForecastQueryProvider",
    "HttpWebhookInvoker",
    "InfluxDBConfig",
    "InfluxQueryProvider",
    "QueryConfig",
    "RobovacConfig",
    "RobovacConfigError",
    "RobovacConfigValidationError",
    "RobovacConnectionError",
    "RobovacError",
    "RobovacQueryError",
    "RobovacTrigger",
    "RobovacWebhookError",
    "TimeRange",
    "VacuumConfig",
    "WebhookInvoker",
    "decide",
    "load_configuration",
]
