"""
Runtime configuration.

Layering, lowest to highest precedence:

  1. built-in defaults
  2. optional TOML file (explicit path, ``$PROXYSWITCH_CONFIG``, or
     ``~/.proxyswitch/config.toml`` when it exists)
  3. environment (``PROXYSWITCH_URL``, ``MIHOMO_SECRET``, ``MOCK_CLASH=1``,
     ``PROXYSWITCH_LOG_LEVEL``)
  4. explicit overrides (CLI flags); ``None`` means "not given"

Example file::

    url = "http://192.168.1.10:9090"
    secret = "s3cr3t"
    request_timeout = 5.0

    [probe]
    url = "https://cp.cloudflare.com/generate_204"
    timeout_ms = 3000

    [logging]
    level = "DEBUG"
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from proxyswitch.core.exceptions import ConfigError
from proxyswitch.directory.client import (
    DEFAULT_PROBE_TIMEOUT_MS,
    DEFAULT_PROBE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_URL,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def config_dir() -> Path:
    return Path.home() / ".proxyswitch"


@dataclass(frozen=True)
class ProxySwitchConfig:
    url: str = DEFAULT_URL
    secret: str = ""
    mock: bool = False
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    probe_url: str = DEFAULT_PROBE_URL
    probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS
    reload_delay: float = 0.2
    log_level: str = "INFO"
    log_file: Path | None = None

    @property
    def resolved_log_file(self) -> Path:
        return self.log_file or config_dir() / "proxyswitch.log"

    def validate(self) -> ProxySwitchConfig:
        if not self.url.startswith(("http://", "https://")):
            raise ConfigError(f"url must start with http:// or https://, got {self.url!r}")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if self.probe_timeout_ms <= 0:
            raise ConfigError("probe.timeout_ms must be positive")
        if self.reload_delay < 0:
            raise ConfigError("reload_delay must not be negative")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"unknown log level {self.log_level!r} (expected one of {', '.join(LOG_LEVELS)})"
            )
        return self


_TOP_LEVEL_KEYS = {"url", "secret", "mock", "request_timeout", "reload_delay"}
_SECTIONS = {
    "probe": {"url": "probe_url", "timeout_ms": "probe_timeout_ms"},
    "logging": {"level": "log_level", "file": "log_file"},
}


def _default_path() -> Path | None:
    env = os.environ.get("PROXYSWITCH_CONFIG")
    if env:
        return Path(env)
    candidate = config_dir() / "config.toml"
    return candidate if candidate.exists() else None


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc

    values: dict[str, Any] = {}
    for key, value in data.items():
        if key in _TOP_LEVEL_KEYS:
            values[key] = value
        elif key in _SECTIONS and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                target = _SECTIONS[key].get(sub_key)
                if target is None:
                    raise ConfigError(f"unknown config key: {key}.{sub_key}")
                values[target] = sub_value
        else:
            raise ConfigError(f"unknown config key: {key}")
    return values


def _read_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    if url := os.environ.get("PROXYSWITCH_URL"):
        values["url"] = url
    if secret := os.environ.get("MIHOMO_SECRET"):
        values["secret"] = secret
    if os.environ.get("MOCK_CLASH") == "1":
        values["mock"] = True
    if level := os.environ.get("PROXYSWITCH_LOG_LEVEL"):
        values["log_level"] = level
    return values


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    types = {f.name: f.type for f in fields(ProxySwitchConfig)}
    out: dict[str, Any] = {}
    for key, value in values.items():
        try:
            if key in ("request_timeout", "reload_delay"):
                out[key] = float(value)
            elif key == "probe_timeout_ms":
                out[key] = int(value)
            elif key == "mock":
                if not isinstance(value, bool):
                    raise ValueError("expected a boolean")
                out[key] = value
            elif key == "log_file":
                out[key] = Path(value).expanduser()
            elif key == "log_level":
                out[key] = str(value).upper()
            elif key in types:
                out[key] = str(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid value for {key}: {value!r}") from exc
    return out


def load_config(path: Path | None = None, **overrides: Any) -> ProxySwitchConfig:
    """Build the effective configuration; raises ConfigError on bad input."""
    values: dict[str, Any] = {}
    file_path = path or _default_path()
    if file_path is not None:
        values.update(_read_toml(file_path))
    values.update(_read_env())
    values.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(values) - {f.name for f in fields(ProxySwitchConfig)}
    if unknown:
        raise ConfigError(f"unknown config key(s): {', '.join(sorted(unknown))}")

    return replace(ProxySwitchConfig(), **_coerce(values)).validate()
