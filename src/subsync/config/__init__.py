"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    env_choice,
    env_float,
    env_int,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import (
    ConfigurationError,
    InvalidConfigurationValueError,
    MissingConfigurationError,
)
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconciliation import (
    DEFAULT_SYNC_CONCURRENCY,
    ReconciliationConfig,
    get_reconciliation_config,
)
from .storage import DatabaseConfig, get_database_config, resolve_data_dir
from .stripe import StripeConfig, build_stripe_resilience, get_stripe_config

__all__ = [
    "DEFAULT_SYNC_CONCURRENCY",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationValueError",
    "MissingConfigurationError",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StripeConfig",
    "build_stripe_resilience",
    "configure_logging",
    "env_choice",
    "env_float",
    "env_int",
    "get_database_config",
    "get_reconciliation_config",
    "get_stripe_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
    "resolve_data_dir",
]
