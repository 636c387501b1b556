"""Configuration management for OpenBroker."""

import os
from typing import Optional
from dataclasses import dataclass, field

from open_broker.protocol.version import BrokerApiVersion, DEFAULT_API_VERSION_HEADER


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class APIConfig:
    """API configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    enable_cors: bool = True
    base_path: str = ""


@dataclass
class BrokerConfig:
    """Protocol configuration.

    ``api_version`` left unset disables the version check; ``*`` accepts any
    version.
    """
    api_version: Optional[str] = None
    api_version_header: str = DEFAULT_API_VERSION_HEADER
    catalog_path: Optional[str] = None
    factory: Optional[str] = None

    def get_api_version(self) -> Optional[BrokerApiVersion]:
        if self.api_version is None:
            return None
        return BrokerApiVersion(api_version=self.api_version, header=self.api_version_header)


@dataclass
class Config:
    """Main configuration class."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: APIConfig = field(default_factory=APIConfig)
    broker: BrokerConfig = field(default_factory=BrokerConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        config = cls()

        # API config
        config.api.host = os.getenv('API_HOST', config.api.host)
        config.api.port = int(os.getenv('API_PORT', str(config.api.port)))
        config.api.debug = os.getenv('API_DEBUG', 'false').lower() == 'true'
        config.api.enable_cors = os.getenv('API_ENABLE_CORS', 'true').lower() == 'true'
        config.api.base_path = os.getenv('BROKER_BASE_PATH', config.api.base_path)

        # Broker config
        config.broker.api_version = os.getenv('BROKER_API_VERSION') or None
        config.broker.api_version_header = os.getenv('BROKER_API_VERSION_HEADER', config.broker.api_version_header)
        config.broker.catalog_path = os.getenv('BROKER_CATALOG_PATH')
        config.broker.factory = os.getenv('BROKER_FACTORY')

        # Logging config
        config.logging.level = os.getenv('LOG_LEVEL', config.logging.level)
        config.logging.file_path = os.getenv('LOG_FILE_PATH')

        return config


# Global configuration instance
config = Config.from_env()
