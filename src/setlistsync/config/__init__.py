"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, HttpRetryPolicy, RateLimit, ResilienceConfig
from .logging import configure_logging
from .spotify import SpotifyConfig, get_spotify_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import (
    DEFAULT_SYNC_JOBS,
    ImportConfig,
    StepRetryConfig,
    SyncJobConfig,
    get_import_config,
)
from .ticketmaster import TicketmasterConfig, get_ticketmaster_config

__all__ = [
    "DEFAULT_SYNC_JOBS",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "HttpRetryPolicy",
    "ImportConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "SpotifyConfig",
    "StepRetryConfig",
    "StorageConfig",
    "SyncJobConfig",
    "TicketmasterConfig",
    "configure_logging",
    "get_database_config",
    "get_import_config",
    "get_spotify_config",
    "get_storage_config",
    "get_ticketmaster_config",
    "optional_env_int",
    "require_env_vars",
]
