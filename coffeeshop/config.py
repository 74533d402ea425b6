# coffeeshop/config.py
import logging
import os
import re
from datetime import timedelta
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

LATENCY_ENV = "COFFEESHOP_LATENCY"
LOG_LEVEL_ENV = "COFFEESHOP_LOG_LEVEL"
DEFAULT_LATENCY = "100ms"

_UNITS_IN_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_TERM = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class ConfigError(ValueError):
    """Invalid server configuration, detected before the server starts."""


def parse_duration(text: str) -> timedelta:
    """Parse a duration expression such as "250ms", "10s" or "1h30m".

    An expression is an optional sign followed by one or more decimal numbers,
    each with a unit suffix (ns, us, ms, s, m, h). A bare "0" is accepted.
    """
    raw = text.strip()
    body = raw
    sign = 1.0
    if body[:1] in ("-", "+"):
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    seconds = 0.0
    pos = 0
    while pos < len(body):
        match = _TERM.match(body, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        seconds += float(number) * _UNITS_IN_SECONDS[unit]
        pos = match.end()
    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError:
        raise ValueError(f"invalid duration {text!r}") from None


def _to_timedelta(value):
    if isinstance(value, str):
        return parse_duration(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return timedelta(seconds=value)
        except OverflowError:
            raise ValueError(f"invalid duration {value!r}") from None
    return value


class ServerConfig(BaseModel):
    """Settings applied when the server is constructed.

    Durations accept timedelta objects, plain seconds or duration expressions
    ("500ms", "10s").
    """

    model_config = ConfigDict(frozen=True)

    latency: timedelta = parse_duration(DEFAULT_LATENCY)
    request_timeout: timedelta = timedelta(seconds=120)
    read_timeout: timedelta = timedelta(seconds=30)
    write_timeout: timedelta = timedelta(seconds=30)
    log_level: str = "INFO"

    @field_validator("latency", "request_timeout", "read_timeout", "write_timeout", mode="before")
    def _parse_durations(cls, value):
        return _to_timedelta(value)

    @field_validator("latency")
    def _latency_not_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("latency must not be negative")
        return value

    @field_validator("request_timeout", "read_timeout", "write_timeout")
    def _timeouts_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("timeouts must be positive")
        return value

    @field_validator("log_level", mode="before")
    def _known_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        values = {"latency": env.get(LATENCY_ENV, DEFAULT_LATENCY)}
        if env.get(LOG_LEVEL_ENV):
            values["log_level"] = env[LOG_LEVEL_ENV]
        try:
            return ServerConfig(**values)
        except ValidationError as exc:
            raise ConfigError(f"invalid configuration: {exc}") from exc

    def with_latency(self, latency) -> "ServerConfig":
        """Return a copy with another latency, validated like the original."""
        try:
            return ServerConfig(**{**self.model_dump(), "latency": latency})
        except ValidationError as exc:
            raise ConfigError(f"invalid latency {latency!r}: {exc}") from exc
