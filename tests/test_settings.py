"""Tests for settings loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from instances_collector.settings import (
    DEFAULT_INFLUXDB_CONNECTION,
    DEFAULT_SOURCE_URL,
    InfluxSettings,
    Settings,
    get_settings,
)

_ENV_VARS = (
    "INFLUXDB_CONNECTION",
    "SOURCE_URL",
    "API_PORT",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = get_settings()

    assert settings.source.url == DEFAULT_SOURCE_URL
    assert settings.influx.connection == DEFAULT_INFLUXDB_CONNECTION
    assert settings.api.port == 8080
    assert settings.log_level == "INFO"
    assert settings.otel_endpoint is None


def test_influxdb_connection_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INFLUXDB_CONNECTION", "http://influxdb:8086")
    assert get_settings().influx.connection == "http://influxdb:8086"


def test_section_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOURCE_URL", "http://mirror.example/list.json")
    monkeypatch.setenv("API_PORT", "9000")
    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317")

    settings = get_settings()

    assert settings.source.url == "http://mirror.example/list.json"
    assert settings.api.port == 9000
    assert settings.log_format == "json"
    assert settings.otel_endpoint == "http://otel-collector:4317"


@pytest.mark.parametrize("value", ["localhost:8086", "ftp://influx:21", "http://"])
def test_invalid_influxdb_connection_rejected(value: str) -> None:
    with pytest.raises(ValidationError):
        InfluxSettings(connection=value)


def test_invalid_connection_from_env_fails_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INFLUXDB_CONNECTION", "not a url")
    with pytest.raises(ValidationError):
        get_settings()


def test_retry_attempts_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(source={"retry_max_attempts": 0})
