"""Precipitation maxima from InfluxDB.

Both windows go through one query builder parameterized by a
:class:`TimeRange`; the result is reduced to a single float by
:func:`decode_scalar`, which refuses anything that is not exactly one
number.
"""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging
import math
from collections.abc import Sequence
from typing import Any, Protocol

import aiohttp
from influxdb_client.client.flux_csv_parser import FluxCsvParserException, FluxQueryException
from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync
from influxdb_client.rest import ApiException

from robovac_trigger.config import InfluxDBConfig, is_valid_duration
from robovac_trigger.exceptions import (
    RobovacConfigValidationError,
    RobovacConnectionError,
    RobovacQueryError,
)

_logger = logging.getLogger(__name__)


class Direction(enum.StrEnum):
    """Which side of *now* a window covers."""

    LOOKBACK = "lookback"
    LOOKFORWARD = "lookforward"


@dataclasses.dataclass(frozen=True)
class TimeRange:
    """A window of ``duration`` ending or starting at *now*."""

    direction: Direction
    duration: str

    def __post_init__(self) -> None:
        if not is_valid_duration(self.duration):
            raise RobovacConfigValidationError(f"{self.direction} duration is not a valid duration: {self.duration!r}")

    @classmethod
    def lookback(cls, duration: str) -> TimeRange:
        return cls(Direction.LOOKBACK, duration)

    @classmethod
    def lookforward(cls, duration: str) -> TimeRange:
        return cls(Direction.LOOKFORWARD, duration)

    @property
    def imports(self) -> tuple[str, ...]:
        if self.direction is Direction.LOOKFORWARD:
            return ("experimental",)
        return ()

    def flux_range(self) -> str:
        """Arguments for the Flux ``range()`` call."""
        if self.direction is Direction.LOOKBACK:
            return f"start: -{self.duration}"
        return f"start: now(), stop: experimental.addDuration(d: {self.duration}, to: now())"

    def __str__(self) -> str:
        return f"{self.direction}:{self.duration}"


def _flux_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_max_query(bucket: str, measurement: str, field: str, time_range: TimeRange) -> str:
    """Flux query for the maximum of *field* in *measurement* over *time_range*."""
    lines = [f"import {_flux_string(name)}" for name in time_range.imports]
    lines.extend(
        [
            f"from(bucket: {_flux_string(bucket)})",
            f"  |> range({time_range.flux_range()})",
            f'  |> filter(fn: (r) => r["_measurement"] == {_flux_string(measurement)}'
            f' and r["_field"] == {_flux_string(field)})',
            '  |> max(column: "_value")',
        ]
    )
    return "\n".join(lines)


def decode_scalar(tables: Sequence[Any], time_range: TimeRange) -> float:
    """Reduce a query result to the value of its first record.

    *tables* is a sequence of Flux tables, each exposing ``records``
    whose items have ``get_value()``. Raises :class:`RobovacQueryError`
    when there is no record or the value is not a finite number.
    """
    for table in tables:
        for record in table.records:
            value = record.get_value()
            # bool is an int subclass but never a precipitation reading
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise RobovacQueryError(
                    f"expected a numeric {time_range.direction} value, got {type(value).__name__}",
                    time_range=str(time_range),
                )
            result = float(value)
            if math.isnan(result):
                raise RobovacQueryError(
                    f"{time_range.direction} value is NaN",
                    time_range=str(time_range),
                )
            return result
    raise RobovacQueryError(
        f"no {time_range.direction} data returned",
        time_range=str(time_range),
    )


class ForecastQueryProvider(Protocol):
    """Structural interface for anything that can answer a max query.

    Tests pass simple fakes; production uses :class:`InfluxQueryProvider`.
    """

    async def query_max(self, bucket: str, measurement: str, field: str, time_range: TimeRange) -> float:
        ...


class InfluxQueryProvider:
    """Query provider backed by ``influxdb-client``'s async API.

    Usage::

        async with InfluxQueryProvider(config.influxdb) as provider:
            value = await provider.query_max(bucket, "weather", "precip", TimeRange.lookback("24h"))
    """

    def __init__(self, config: InfluxDBConfig) -> None:
        self._config = config
        self._client: InfluxDBClientAsync | None = None

    async def __aenter__(self) -> InfluxQueryProvider:
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        """Create the underlying client; no request is made yet."""
        if self._client is not None:
            return
        if not self._config.address:
            raise RobovacConnectionError("influxDB.address is not configured")
        try:
            self._client = InfluxDBClientAsync(
                url=self._config.address,
                token=self._config.auth_token(),
                org=self._config.organization or None,
                verify_ssl=not self._config.skip_verify_ssl,
            )
        except (ValueError, aiohttp.ClientError) as exc:
            raise RobovacConnectionError(
                f"failed to create InfluxDB client: {exc}",
                address=self._config.address,
            ) from exc
        _logger.debug(
            "InfluxDB client created address=%s verify_ssl=%s",
            self._config.address,
            not self._config.skip_verify_ssl,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def query_max(self, bucket: str, measurement: str, field: str, time_range: TimeRange) -> float:
        """Run the max query for *time_range* and decode its single value."""
        if self._client is None:
            raise RobovacConnectionError("InfluxDB client not connected", address=self._config.address)

        query = build_max_query(bucket, measurement, field, time_range)
        _logger.debug("Flux query range=%s\n%s", time_range, query)
        try:
            tables = await self._client.query_api().query(query, org=self._config.organization or None)
        except ApiException as exc:
            raise RobovacQueryError(
                f"failed to query {time_range.direction} data from InfluxDB: HTTP {exc.status} {exc.reason}",
                time_range=str(time_range),
            ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RobovacQueryError(
                f"failed to query {time_range.direction} data from InfluxDB: {exc}",
                time_range=str(time_range),
            ) from exc
        except FluxQueryException as exc:
            raise RobovacQueryError(
                f"InfluxDB rejected the {time_range.direction} query: {exc.message}",
                time_range=str(time_range),
            ) from exc
        except FluxCsvParserException as exc:
            raise RobovacQueryError(
                f"failed parsing {time_range.direction} data from InfluxDB: {exc}",
                time_range=str(time_range),
            ) from exc

        value = decode_scalar(tables, time_range)
        _logger.debug("Query result range=%s value=%s", time_range, value)
        return value
