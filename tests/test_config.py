# tests/test_config.py
from datetime import timedelta

import pytest
from pydantic import ValidationError

from coffeeshop.config import ConfigError, ServerConfig, parse_duration


@pytest.mark.parametrize(
    "text, expected",
    [
        ("100ms", timedelta(milliseconds=100)),
        ("10s", timedelta(seconds=10)),
        ("250ms", timedelta(milliseconds=250)),
        ("1m30s", timedelta(seconds=90)),
        ("1.5h", timedelta(minutes=90)),
        ("0", timedelta(0)),
        ("0ms", timedelta(0)),
        ("1500us", timedelta(microseconds=1500)),
        ("2µs", timedelta(microseconds=2)),
        ("+5s", timedelta(seconds=5)),
        ("-5s", timedelta(seconds=-5)),
        (".5s", timedelta(milliseconds=500)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "10", "ms", "10 s", "1x", "1.2.3s", "s10", "-", "1h 30m", "9999999999999h", "9" * 400 + "s"],
)
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_defaults():
    config = ServerConfig()
    assert config.latency == timedelta(milliseconds=100)
    assert config.request_timeout == timedelta(seconds=120)
    assert config.read_timeout == timedelta(seconds=30)
    assert config.write_timeout == timedelta(seconds=30)


def test_from_env_default_latency():
    assert ServerConfig.from_env({}).latency == timedelta(milliseconds=100)


def test_from_env_latency():
    config = ServerConfig.from_env({"COFFEESHOP_LATENCY": "10s", "COFFEESHOP_LOG_LEVEL": "debug"})
    assert config.latency == timedelta(seconds=10)
    assert config.log_level == "DEBUG"


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("COFFEESHOP_LATENCY", "500ms")
    assert ServerConfig.from_env().latency == timedelta(milliseconds=500)


@pytest.mark.parametrize("latency", ["fast", "9999999999999h"])
def test_from_env_invalid_latency(latency):
    with pytest.raises(ConfigError):
        ServerConfig.from_env({"COFFEESHOP_LATENCY": latency})


def test_from_env_invalid_log_level():
    with pytest.raises(ConfigError):
        ServerConfig.from_env({"COFFEESHOP_LOG_LEVEL": "chatty"})


def test_negative_latency_rejected():
    with pytest.raises(ValidationError):
        ServerConfig(latency="-1s")


def test_numbers_are_seconds():
    assert ServerConfig(latency=0.25).latency == timedelta(milliseconds=250)


def test_out_of_range_number_rejected():
    with pytest.raises(ValidationError):
        ServerConfig(latency=1e300)


def test_with_latency():
    config = ServerConfig(request_timeout="5s")
    updated = config.with_latency("2s")
    assert updated.latency == timedelta(seconds=2)
    assert updated.request_timeout == timedelta(seconds=5)
    assert config.latency == timedelta(milliseconds=100)
    with pytest.raises(ConfigError):
        config.with_latency("soon")
