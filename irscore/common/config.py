"""Configuration management for relevance scoring.

This module centralizes environment-driven configuration for the scoring
components (statistics store, caching, worker threads, observability). It
builds on ``pydantic_settings.BaseSettings`` so configuration can be
provided via environment variables, ``.env`` files, or defaults.

Per-query parameters (field, terms, lambda, ...) are not configuration in
this sense; they travel with each request, see
``irscore.scoring.request``.

Usage
- ``config = ScoringConfig()`` in an entrypoint
- Or select dynamically: ``config = get_config("scripts")``
"""

import os
from typing import Any, Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringConfig(BaseSettings):
    """Base configuration for scoring processes.

    Parameters are read from the process environment using the upper-cased
    field names (``IRSCORE_REDIS_URL`` for ``irscore_redis_url``).

    Notes
    - Add new shared settings here so entrypoints inherit them.
    - Prefer a field here over reading ``os.environ`` directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    irscore_env: str = Field(default="local")

    # Collection statistics store
    irscore_stats_backend: str = Field(default="redis")
    irscore_redis_url: str = Field(default="redis://localhost:6379/0")
    irscore_redis_pool_size: int = Field(default=16, ge=1)
    irscore_redis_socket_timeout: float = Field(default=5.0, gt=0)
    irscore_stats_cache_enabled: bool = Field(default=False)

    # Execution
    irscore_max_workers: int = Field(default=1, ge=1)

    # Logging
    irscore_log_level: str = Field(default="INFO")
    irscore_log_format: str = Field(default="json")

    # Observability
    irscore_tracing_enabled: bool = Field(default=False)
    irscore_otel_service_name: str = Field(default="irscore")


class ScriptConfig(ScoringConfig):
    """Configuration for the command line scripts.

    Scripts are interactive by default, so logs go to the console renderer.
    """

    irscore_log_format: str = Field(default="console")
    irscore_stats_load_batch_size: int = Field(default=1000, ge=1)


def get_config(process_name: str) -> ScoringConfig:
    """Get configuration for a specific process type.

    Parameters
    - process_name: ``scoring`` or ``scripts``

    Returns
    - A concrete ``ScoringConfig`` subclass reading the right env vars.
    """
    config_map = {
        "scoring": ScoringConfig,
        "scripts": ScriptConfig,
    }

    config_class = config_map.get(process_name, ScoringConfig)
    return config_class()


def load_env_file(env_file: str = ".env") -> Dict[str, Any]:
    """Load ``KEY=VALUE`` pairs from a dotenv-style file.

    Blank lines and comments are ignored. The process environment is not
    modified; callers can pass the result to
    ``irscore.collection_stats.factory.create_statistics_store_from_env``.
    """
    env_vars = {}
    if os.path.exists(env_file):
        with open(env_file, "r") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    env_vars[key.strip()] = value.strip()
    return env_vars
