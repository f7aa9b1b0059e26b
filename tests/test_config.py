from __future__ import annotations

from pathlib import Path

import pytest

from robovac_trigger.config import InfluxDBConfig, RobovacConfig, is_valid_duration, load_configuration
from robovac_trigger.exceptions import RobovacConfigError, RobovacConfigValidationError

_CONFIG_YAML = """\
vacuum:
  webhookStart: https://ha.local/api/webhook/start-abc
  webhookStop: https://ha.local/api/webhook/stop-abc
  skipVerifySsl: true
query:
  lookbackDuration: 24h
  lookforwardDuration: 12h
influxDB:
  address: http://influx.local:8086
  username: robovac
  password: hunter2
  measurement: weather
  field: precipitation
  database: weather
  retentionPolicy: autogen
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_configuration_reads_all_sections(tmp_path: Path) -> None:
    config = load_configuration(_write(tmp_path, _CONFIG_YAML), env={})

    assert config.vacuum.webhook_start == "https://ha.local/api/webhook/start-abc"
    assert config.vacuum.webhook_stop == "https://ha.local/api/webhook/stop-abc"
    assert config.vacuum.skip_verify_ssl is True
    assert config.query.lookback_duration == "24h"
    assert config.query.lookforward_duration == "12h"
    assert config.influxdb.address == "http://influx.local:8086"
    assert config.influxdb.measurement == "weather"
    assert config.influxdb.retention_policy == "autogen"
    assert config.influxdb.skip_verify_ssl is False


def test_keys_are_case_insensitive(tmp_path: Path) -> None:
    text = "VACUUM:\n  webhookstart: http://x/start\nInfluxdb:\n  BUCKET: b\n"
    config = load_configuration(_write(tmp_path, text), env={})
    assert config.vacuum.webhook_start == "http://x/start"
    assert config.influxdb.bucket == "b"


def test_env_overrides_file_values(tmp_path: Path) -> None:
    env = {
        "ROBOVAC_INFLUXDB_TOKEN": "secret-token",
        "ROBOVAC_VACUUM_SKIPVERIFYSSL": "no",
        "ROBOVAC_QUERY_LOOKBACKDURATION": "6h",
    }
    config = load_configuration(_write(tmp_path, _CONFIG_YAML), env=env)
    assert config.influxdb.token == "secret-token"
    assert config.vacuum.skip_verify_ssl is False
    assert config.query.lookback_duration == "6h"


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(RobovacConfigError) as exc_info:
        load_configuration(tmp_path / "nope.yaml", env={})
    assert exc_info.value.path.endswith("nope.yaml")


def test_unparseable_yaml_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(RobovacConfigError):
        load_configuration(_write(tmp_path, "vacuum: [unclosed\n"), env={})


def test_non_mapping_document_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(RobovacConfigError):
        load_configuration(_write(tmp_path, "- a\n- b\n"), env={})


def test_section_must_be_mapping() -> None:
    with pytest.raises(RobovacConfigError):
        RobovacConfig.from_mapping({"vacuum": "nope"}, env={})


def test_invalid_boolean_raises_config_error() -> None:
    with pytest.raises(RobovacConfigError):
        RobovacConfig.from_mapping({"vacuum": {"skipVerifySsl": "maybe"}}, env={})


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    config = load_configuration(_write(tmp_path, ""), env={})
    assert config == RobovacConfig()


def test_invalid_duration_rejected() -> None:
    with pytest.raises(RobovacConfigValidationError):
        RobovacConfig.from_mapping({"query": {"lookbackDuration": "one day"}}, env={})


@pytest.mark.parametrize("value", ["24h", "1h30m", "90s", "2d", "1w", "1mo", "500ms"])
def test_valid_durations(value: str) -> None:
    assert is_valid_duration(value)


@pytest.mark.parametrize("value", ["", "h", "24", "-24h", "24 h", "24h)"])
def test_invalid_durations(value: str) -> None:
    assert not is_valid_duration(value)


def test_bucket_wins_over_database_and_retention_policy() -> None:
    influx = InfluxDBConfig(bucket="b", database="d", retention_policy="r")
    assert influx.resolve_bucket() == "b"


def test_bucket_composed_from_database_and_retention_policy() -> None:
    influx = InfluxDBConfig(database="d", retention_policy="r")
    assert influx.resolve_bucket() == "d/r"


def test_bucket_resolution_fails_without_any_source() -> None:
    with pytest.raises(RobovacConfigValidationError):
        InfluxDBConfig().resolve_bucket()


def test_bucket_resolution_needs_both_database_and_retention_policy() -> None:
    with pytest.raises(RobovacConfigValidationError):
        InfluxDBConfig(database="d").resolve_bucket()


def test_auth_token_precedence() -> None:
    assert InfluxDBConfig(token="t", username="u", password="p").auth_token() == "t"
    assert InfluxDBConfig(username="u", password="p").auth_token() == "u:p"
    assert InfluxDBConfig(username="u").auth_token() == ""
    assert InfluxDBConfig().auth_token() == ""
