"""Configuration for robovac_trigger.

The configuration file is YAML with three sections::

    vacuum:
      webhookStart: https://homeassistant.local/api/webhook/robovac-start
      webhookStop: https://homeassistant.local/api/webhook/robovac-stop
      skipVerifySsl: false
    query:
      lookbackDuration: 24h
      lookforwardDuration: 12h
    influxDB:
      address: http://influxdb.local:8086
      measurement: weather
      field: precipitation
      bucket: weather/autogen

Keys are matched case-insensitively. Any value can be overridden from the
environment as ``ROBOVAC_<SECTION>_<KEY>``, e.g. ``ROBOVAC_INFLUXDB_TOKEN``.
"""

from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from robovac_trigger.exceptions import RobovacConfigError, RobovacConfigValidationError

ENV_PREFIX = "ROBOVAC_"

# Flux duration literal: one or more <int><unit> pairs, e.g. 24h, 1h30m, 2w.
_DURATION_RE = re.compile(r"(?:\d+(?:ns|us|µs|ms|mo|s|m|h|d|w|y))+")


def _parse_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"", "0", "false", "no", "n", "off"}:
        return False
    raise RobovacConfigError(f"{key} must be a boolean, got {value!r}")


def is_valid_duration(value: str) -> bool:
    """Return ``True`` when *value* is a Flux duration literal such as ``24h``."""
    return bool(_DURATION_RE.fullmatch(value))


@dataclasses.dataclass(frozen=True)
class VacuumConfig:
    """Webhooks that drive the robot vacuum.

    Parameters
    ----------
    webhook_start : str
        URL fetched with a plain GET to start the vacuum.
    webhook_stop : str
        URL fetched with a plain GET to stop the vacuum.
    skip_verify_ssl : bool
        Disable TLS certificate verification for webhook calls.
    """

    webhook_start: str = ""
    webhook_stop: str = ""
    skip_verify_ssl: bool = False


@dataclasses.dataclass(frozen=True)
class QueryConfig:
    """Window sizes, as Flux duration literals."""

    lookback_duration: str = ""
    lookforward_duration: str = ""


@dataclasses.dataclass(frozen=True)
class InfluxDBConfig:
    """Connection and series parameters for InfluxDB.

    Works against InfluxDB 2.x (``token``, ``organization``, ``bucket``)
    and the 1.8 compatibility API (``username``/``password``,
    ``database``/``retention_policy``).
    """

    address: str = ""
    username: str = ""
    password: str = ""
    measurement: str = ""
    field: str = ""
    database: str = ""
    retention_policy: str = ""
    token: str = ""
    organization: str = ""
    bucket: str = ""
    skip_verify_ssl: bool = False

    def auth_token(self) -> str:
        """Credential passed to the client.

        ``token`` wins, then ``username:password`` when both are set,
        otherwise an empty string for anonymous access.
        """
        if self.token:
            return self.token
        if self.username and self.password:
            return f"{self.username}:{self.password}"
        return ""

    def resolve_bucket(self) -> str:
        """Bucket to query: ``bucket`` if set, else ``database/retention_policy``.

        Raises :class:`RobovacConfigValidationError` when neither is configured.
        """
        if self.bucket:
            return self.bucket
        if self.database and self.retention_policy:
            return f"{self.database}/{self.retention_policy}"
        raise RobovacConfigValidationError("must configure at least one of bucket or database/retention policy")


@dataclasses.dataclass(frozen=True)
class RobovacConfig:
    """Complete configuration for one run."""

    vacuum: VacuumConfig = dataclasses.field(default_factory=VacuumConfig)
    query: QueryConfig = dataclasses.field(default_factory=QueryConfig)
    influxdb: InfluxDBConfig = dataclasses.field(default_factory=InfluxDBConfig)

    def __post_init__(self) -> None:
        for name in ("lookback_duration", "lookforward_duration"):
            value = getattr(self.query, name)
            if value and not is_valid_duration(value):
                raise RobovacConfigValidationError(f"query.{name} is not a valid duration: {value!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], env: Mapping[str, str] | None = None) -> RobovacConfig:
        """Build configuration from a parsed YAML mapping plus env overrides.

        Parameters
        ----------
        data : Mapping
            Top-level YAML document.
        env : Mapping, optional
            Environment to read ``ROBOVAC_*`` overrides from. Defaults to
            :data:`os.environ`.

        Returns
        -------
        RobovacConfig
            Populated configuration.
        """
        if env is None:
            env = os.environ
        sections = {str(k).lower(): v for k, v in data.items()}

        kwargs: dict[str, Any] = {}
        for attr, section_cls in (
            ("vacuum", VacuumConfig),
            ("query", QueryConfig),
            ("influxdb", InfluxDBConfig),
        ):
            raw = sections.get(attr) or {}
            if not isinstance(raw, Mapping):
                raise RobovacConfigError(f"section {attr!r} must be a mapping, got {type(raw).__name__}")
            kwargs[attr] = _build_section(attr, section_cls, raw, env)
        return cls(**kwargs)


def _build_section(
    section: str,
    section_cls: type[Any],
    raw: Mapping[str, Any],
    env: Mapping[str, str],
) -> Any:
    # YAML keys are camelCase (webhookStart); fields are snake_case.
    values = {str(k).lower(): v for k, v in raw.items()}
    field_kwargs: dict[str, Any] = {}
    for fld in dataclasses.fields(section_cls):
        key = fld.name.replace("_", "")
        value = values.get(key)
        env_value = env.get(f"{ENV_PREFIX}{section.upper()}_{key.upper()}")
        if env_value is not None:
            value = env_value
        if value is None:
            continue
        if fld.type in (bool, "bool"):
            field_kwargs[fld.name] = _parse_bool(value, key=f"{section}.{key}")
        else:
            field_kwargs[fld.name] = str(value).strip()
    return section_cls(**field_kwargs)


def load_configuration(path: str | os.PathLike[str], env: Mapping[str, str] | None = None) -> RobovacConfig:
    """Load the YAML configuration at *path*.

    Raises :class:`RobovacConfigError` if the file cannot be read or
    parsed, and :class:`RobovacConfigValidationError` for values that
    parse but are unusable.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RobovacConfigError(f"error reading config file, {exc}", path=str(config_path)) from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RobovacConfigError(f"unable to decode config file, {exc}", path=str(config_path)) from exc

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise RobovacConfigError(
            f"config file must contain a mapping, got {type(data).__name__}",
            path=str(config_path),
        )
    return RobovacConfig.from_mapping(data, env)
