from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping

from .models import DEFAULT_LINE_LENGTH, FormatConfiguration
from .settings import Settings
from .transport import (
    DEFAULT_CONNECT_TIMEOUT_S,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT_S,
)
from .versions import parse_target_versions


@dataclass(slots=True)
class DaemonConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S
    read_timeout_s: float = DEFAULT_READ_TIMEOUT_S


@dataclass(slots=True)
class RuntimeConfig:
    log_file: Path | None = None


@dataclass(slots=True)
class AppConfig:
    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    format: FormatConfiguration = field(default_factory=FormatConfiguration)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    data = raw.get(name)
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValueError(f"[{name}] must be a table, got {type(data).__name__}")
    return data


def _build_daemon(data: Mapping[str, object] | None) -> DaemonConfig:
    if not data:
        return DaemonConfig()
    return DaemonConfig(
        host=str(data.get("host", DEFAULT_HOST)),
        port=int(data.get("port", DEFAULT_PORT)),
        connect_timeout_s=float(data.get("connect_timeout_s", DEFAULT_CONNECT_TIMEOUT_S)),
        read_timeout_s=float(data.get("read_timeout_s", DEFAULT_READ_TIMEOUT_S)),
    )


def _build_format(data: Mapping[str, object] | None) -> FormatConfiguration:
    if not data:
        return FormatConfiguration()
    versions = data.get("target_versions")
    if versions is not None and not isinstance(versions, (str, list)):
        raise ValueError(f"Unsupported target_versions configuration: {versions!r}")
    return FormatConfiguration(
        line_length=int(data.get("line_length", DEFAULT_LINE_LENGTH)),
        target_versions=parse_target_versions(versions),
        skip_string_normalization=bool(data.get("skip_string_normalization", False)),
        skip_magic_trailing_comma=bool(data.get("skip_magic_trailing_comma", False)),
        fast=bool(data.get("fast", False)),
        safe=bool(data.get("safe", False)),
        diff=bool(data.get("diff", False)),
    )


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data or data.get("log_file") is None:
        return RuntimeConfig()
    return RuntimeConfig(log_file=Path(str(data["log_file"])))


def load_config(path: Path | None = None) -> AppConfig:
    """Load an optional TOML config file; no path means built-in defaults."""

    if path is None:
        return AppConfig()
    raw = _read_toml(path)
    return AppConfig(
        daemon=_build_daemon(_section(raw, "daemon")),
        format=_build_format(_section(raw, "format")),
        runtime=_build_runtime(_section(raw, "runtime")),
    )


def apply_settings(config: AppConfig, settings: Settings) -> AppConfig:
    daemon = config.daemon
    overrides = {
        "host": settings.host,
        "port": settings.port,
        "connect_timeout_s": settings.connect_timeout_s,
        "read_timeout_s": settings.read_timeout_s,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(daemon, name, value)
    if settings.log_file is not None:
        config.runtime.log_file = settings.log_file
    return config


def resolve_config(settings: Settings, path: Path | None = None) -> AppConfig:
    return apply_settings(load_config(path or settings.config_path), settings)


def dump_config(config: AppConfig) -> str:
    payload = {
        "daemon": {
            "host": config.daemon.host,
            "port": config.daemon.port,
            "connect_timeout_s": config.daemon.connect_timeout_s,
            "read_timeout_s": config.daemon.read_timeout_s,
        },
        "format": {
            "line_length": config.format.line_length,
            "target_versions": [version.value for version in config.format.target_versions],
            "skip_string_normalization": config.format.skip_string_normalization,
            "skip_magic_trailing_comma": config.format.skip_magic_trailing_comma,
            "fast": config.format.fast,
            "safe": config.format.safe,
            "diff": config.format.diff,
        },
        "runtime": {
            "log_file": str(config.runtime.log_file) if config.runtime.log_file else None,
        },
    }
    return json.dumps(payload, indent=2)


def with_format(config: AppConfig, **changes: object) -> AppConfig:
    config.format = replace(config.format, **changes)
    return config


__all__ = [
    "AppConfig",
    "DaemonConfig",
    "RuntimeConfig",
    "load_config",
    "apply_settings",
    "resolve_config",
    "dump_config",
    "with_format",
]
