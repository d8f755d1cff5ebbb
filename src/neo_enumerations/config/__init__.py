"""Configuration module for neo-enumerations."""

from .constants import (
    MissPolicy,
    UpdateOperation,
    CacheState,
    EnumerationDefaults,
)

from .settings import (
    EnumerationSettings,
    get_settings,
)

from .logging_config import (
    setup_logging,
    get_logger,
    LogLevel,
    LogFormat,
    LoggingConfig,
)

__all__ = [
    "MissPolicy",
    "UpdateOperation",
    "CacheState",
    "EnumerationDefaults",
    "EnumerationSettings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "LogLevel",
    "LogFormat",
    "LoggingConfig",
]
