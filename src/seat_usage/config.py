"""
Loader configuration.

`LoaderConfig` is an immutable value passed to every entry point. Build it from
environment variables (`LoaderConfig.from_env`) or from a YAML file
(`LoaderConfig.from_yaml`), or construct it directly in tests.

YAML values of the form `${VAR}` are resolved from the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from seat_usage.constants import (
    DEFAULT_APP_NAME,
    DEFAULT_MAX_CREATE_ATTEMPTS,
    DEFAULT_METRICS_BASE_NAME,
    DEFAULT_USERS_BASE_NAME,
)
from seat_usage.errors import ConfigurationError
from seat_usage.versioning.resolver import UNRECOGNIZED_VERSION, resolve_version

ENV_VARS: Mapping[str, str] = {
    "catalog_name": "SEAT_USAGE_CATALOG",
    "schema_name": "SEAT_USAGE_SCHEMA",
    "csv_path": "SEAT_USAGE_CSV_PATH",
    "users_base_name": "SEAT_USAGE_USERS_TABLE",
    "metrics_base_name": "SEAT_USAGE_METRICS_TABLE",
    "app_name": "SEAT_USAGE_APP_NAME",
    "max_create_attempts": "SEAT_USAGE_MAX_CREATE_ATTEMPTS",
}


@dataclass(frozen=True)
class LoaderConfig:
    """Where to read the export from and where to load it."""

    schema_name: str
    csv_path: str
    catalog_name: str | None = None
    users_base_name: str = DEFAULT_USERS_BASE_NAME
    metrics_base_name: str = DEFAULT_METRICS_BASE_NAME
    app_name: str = DEFAULT_APP_NAME
    max_create_attempts: int = DEFAULT_MAX_CREATE_ATTEMPTS

    def __post_init__(self) -> None:
        for name in ("schema_name", "csv_path", "users_base_name", "metrics_base_name"):
            if not str(getattr(self, name) or "").strip():
                raise ConfigurationError(f"Configuration value '{name}' must not be empty.")
        if _same_family(self.users_base_name, self.metrics_base_name):
            raise ConfigurationError(
                f"Base names '{self.users_base_name}' and '{self.metrics_base_name}' "
                "overlap: one names a version of the other."
            )
        if self.max_create_attempts < 1:
            raise ConfigurationError("max_create_attempts must be at least 1.")

    # ---------- constructors ----------

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> LoaderConfig:
        """Build from a plain mapping, ignoring None values and rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration key(s): {', '.join(unknown)}")

        kwargs = {k: v for k, v in values.items() if v is not None}
        missing = [name for name in ("schema_name", "csv_path") if name not in kwargs]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
        if "max_create_attempts" in kwargs:
            kwargs["max_create_attempts"] = _to_int(
                "max_create_attempts", kwargs["max_create_attempts"]
            )
        return cls(**kwargs)

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> LoaderConfig:
        """Build from SEAT_USAGE_* environment variables; non-None overrides win."""
        values = env_values(environ)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_mapping(values)

    @classmethod
    def from_yaml(cls, path: str | Path, environ: Mapping[str, str] | None = None) -> LoaderConfig:
        """Build from a YAML file with one key per field."""
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigurationError(f"Config file not found: {config_path}")
        with config_path.open("r") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping.")

        env = os.environ if environ is None else environ
        return cls.from_mapping({k: _resolve(v, env) for k, v in loaded.items()})

    def with_overrides(self, **overrides: Any) -> LoaderConfig:
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def env_values(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Map each config field to its SEAT_USAGE_* variable (None when unset or empty)."""
    env = os.environ if environ is None else environ
    return {field: env.get(var) or None for field, var in ENV_VARS.items()}


def _same_family(first: str, second: str) -> bool:
    """True when either base name resolves to a version of the other."""
    return (
        resolve_version(first, second) != UNRECOGNIZED_VERSION
        or resolve_version(second, first) != UNRECOGNIZED_VERSION
    )


def _resolve(value: Any, environ: Mapping[str, str]) -> Any:
    """Resolve a `${VAR}` placeholder from the environment; other values pass through."""
    if not isinstance(value, str):
        return value
    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        if var_name not in environ:
            raise ConfigurationError(f"Environment variable '{var_name}' is not set.")
        return environ[var_name]
    return value


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as error:
        raise ConfigurationError(f"Configuration value '{name}' must be an integer.") from error
