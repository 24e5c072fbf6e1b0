"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, resilience_from_env
from .inspection import InspectionConfig, get_inspection_config, parse_repository_mapping
from .intelligence import IntelligenceConfig, get_intelligence_config
from .logging import configure_logging
from .storage import DatabaseConfig, default_data_dir, get_database_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InspectionConfig",
    "IntelligenceConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "default_data_dir",
    "get_database_config",
    "get_inspection_config",
    "get_intelligence_config",
    "parse_repository_mapping",
    "require_env_var",
    "require_env_vars",
    "resilience_from_env",
]
