"""Shared constant values used across the loader."""

from typing import Final

DEFAULT_USERS_BASE_NAME: Final[str] = "users"
DEFAULT_METRICS_BASE_NAME: Final[str] = "metrics"
DEFAULT_APP_NAME: Final[str] = "seat-usage-loader"
DEFAULT_MAX_CREATE_ATTEMPTS: Final[int] = 3
VERSION_SUFFIX: Final[str] = "_v"
