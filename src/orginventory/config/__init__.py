"""Configuration models and loaders."""

from .environment import ConnectionSettings, load_connection_settings
from .loader import get_config, load_config, load_raw_config
from .models import (
    ConnectionConfig,
    DetectionRulesConfig,
    IntegrationsConfig,
    InventoryConfig,
    LoggingConfig,
    ObjectProbeConfig,
    PackageProbeConfig,
    PerformanceConfig,
    ProbeCatalogConfig,
    RateLimitConfig,
    RetrySettings,
    SecurityConfig,
)

__all__ = [
    "ConnectionConfig",
    "ConnectionSettings",
    "DetectionRulesConfig",
    "IntegrationsConfig",
    "InventoryConfig",
    "LoggingConfig",
    "ObjectProbeConfig",
    "PackageProbeConfig",
    "PerformanceConfig",
    "ProbeCatalogConfig",
    "RateLimitConfig",
    "RetrySettings",
    "SecurityConfig",
    "get_config",
    "load_config",
    "load_connection_settings",
    "load_raw_config",
]
