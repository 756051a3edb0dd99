"""Reporter configuration."""

from .config import (
    ReporterConfig,
    ReporterConfigManager,
    PageContext,
    ConfigError,
    ANALYTICS_VERSION,
    DEFAULT_QUEUE_TIMEOUT,
    DEFAULT_HOST,
)

__all__ = [
    "ReporterConfig",
    "ReporterConfigManager",
    "PageContext",
    "ConfigError",
    "ANALYTICS_VERSION",
    "DEFAULT_QUEUE_TIMEOUT",
    "DEFAULT_HOST",
]
