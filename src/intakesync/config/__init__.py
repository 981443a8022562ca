"""Application configuration helpers."""

from __future__ import annotations

from .bookings import BookingSourceConfig, get_booking_source_config
from .env import optional_env_var, optional_int_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .jotform import JotformConfig, get_jotform_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config

__all__ = [
    "BookingSourceConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "JotformConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_booking_source_config",
    "get_database_config",
    "get_database_uri",
    "get_jotform_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "optional_int_env_var",
    "require_env_vars",
]
