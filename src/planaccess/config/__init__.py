"""Application configuration helpers."""

from __future__ import annotations

from .cloudfoundry import CloudFoundryConfig, get_cloudfoundry_config
from .env import env_flag, env_float, require_env_var, require_env_vars
from .errors import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging

__all__ = [
    "CloudFoundryConfig",
    "ConfigurationError",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "env_flag",
    "env_float",
    "get_cloudfoundry_config",
    "require_env_var",
    "require_env_vars",
]
