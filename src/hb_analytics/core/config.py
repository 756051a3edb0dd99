"""Reporter configuration and its persistence."""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional, Any

logger = logging.getLogger(__name__)

ANALYTICS_VERSION = '1.0.0'
DEFAULT_QUEUE_TIMEOUT = 4000  # milliseconds
DEFAULT_HOST = 'tag.staq.com'
DEFAULT_REQUEST_TIMEOUT = 10  # seconds


class ConfigError(ValueError):
    """Required reporter configuration is missing or invalid."""


@dataclass
class ReporterConfig:
    """Settings needed to activate a reporter."""

    conn_id: str = ""
    url: str = ""
    host: str = DEFAULT_HOST
    queue_timeout_ms: int = DEFAULT_QUEUE_TIMEOUT

    # JSON file for the attribution store; in-memory when unset
    storage_path: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_options(cls, options: Dict[str, Any]) -> 'ReporterConfig':
        """Build from framework-style options (connId, url, host, queueTimeout)."""
        return cls(
            conn_id=options.get('connId') or "",
            url=options.get('url') or "",
            host=options.get('host') or DEFAULT_HOST,
            queue_timeout_ms=options.get('queueTimeout') or DEFAULT_QUEUE_TIMEOUT,
            storage_path=options.get('storagePath'),
            request_timeout=options.get('requestTimeout') or DEFAULT_REQUEST_TIMEOUT,
        )

    def validate(self):
        """Raise ConfigError when the reporter cannot run with these settings."""
        if not self.conn_id:
            raise ConfigError("ConnId is not defined")
        if not self.url:
            raise ConfigError("URL is not defined")
        if self.queue_timeout_ms <= 0:
            raise ConfigError(f"Queue timeout must be positive, got {self.queue_timeout_ms}")

    @property
    def endpoint(self) -> str:
        """Collector endpoint for this connection."""
        return f"https://{self.url}/prebid/{self.conn_id}"


@dataclass
class PageContext:
    """The page the reporter runs on."""

    url: str
    referrer: str = ""
    screen_width: int = 0
    screen_height: int = 0
    language: str = ""


class ReporterConfigManager:
    """Load and save reporter configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager."""
        self.config_path = config_path or Path.home() / ".hb-analytics" / "config.json"
        self.config = self._load_config()

    def _load_config(self) -> ReporterConfig:
        """Load configuration from file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                    return ReporterConfig(
                        conn_id=data.get("conn_id", ""),
                        url=data.get("url", ""),
                        host=data.get("host", DEFAULT_HOST),
                        queue_timeout_ms=data.get("queue_timeout_ms", DEFAULT_QUEUE_TIMEOUT),
                        storage_path=data.get("storage_path"),
                        request_timeout=data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT),
                    )
            except (OSError, ValueError, AttributeError) as e:
                logger.error(f"Error loading reporter config: {e}")

        return ReporterConfig()

    def save_config(self):
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(asdict(self.config), f, indent=2)

    def update(self, **kwargs) -> ReporterConfig:
        """Update known fields and persist."""
        for key, value in kwargs.items():
            if not hasattr(self.config, key):
                raise ConfigError(f"Unknown config field: {key}")
            setattr(self.config, key, value)
        self.save_config()
        return self.config
