"""Configuration management for MoneyTransfer."""
import os
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from dotenv import load_dotenv
from moneytransfer.utils.errors import ConfigurationError
from moneytransfer.utils.logging import setup_logging
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


class Config:
    """Application configuration."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH, configure_logging: bool = True):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML configuration file
            configure_logging: Apply the ``logging`` section on load
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load(configure_logging)

    def _load(self, configure_logging: bool) -> None:
        """Load configuration from YAML and environment."""
        load_dotenv()

        if not self.config_path.exists():
            raise ConfigurationError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}")

        if not self._config:
            raise ConfigurationError(f"Empty configuration file: {self.config_path}")
        if not isinstance(self._config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self.config_path}")

        self._validate()

        if configure_logging:
            log_config = self._config.get('logging', {})
            setup_logging(
                level=os.getenv('LOG_LEVEL', log_config.get('level', 'INFO')),
                log_file=log_config.get('file'),
                format_type=log_config.get('format', 'json'),
                enabled=log_config.get('enabled', True)
            )

        logger.info("Configuration loaded successfully")

    def _validate(self) -> None:
        """Validate required configuration sections."""
        required_sections = ['app', 'provider']

        for section in required_sections:
            if section not in self._config:
                raise ConfigurationError(f"Missing required config section: {section}")

        if 'kind' not in self._config['provider']:
            raise ConfigurationError("Missing provider.kind in config")

        try:
            debounce = self.debounce_seconds
        except (TypeError, ValueError):
            raise ConfigurationError("converter.debounce_seconds must be a number")
        if debounce < 0:
            raise ConfigurationError(f"converter.debounce_seconds must be >= 0, got {debounce}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-separated key.

        Args:
            key: Dot-separated key (e.g., "provider.http.endpoint")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable."""
        return os.getenv(key, default)

    def require_env(self, key: str) -> str:
        """Get required environment variable or raise error."""
        value = os.getenv(key)
        if value is None:
            raise ConfigurationError(f"Required environment variable not set: {key}")
        return value

    @property
    def app_name(self) -> str:
        return self.get('app.name', 'MoneyTransfer')

    @property
    def app_version(self) -> str:
        return self.get('app.version', '0.1.0')

    @property
    def debug(self) -> bool:
        return self.get('app.debug', False)

    @property
    def provider_kind(self) -> str:
        """Provider name, overridable with MONEYTRANSFER_PROVIDER."""
        return self.get_env('MONEYTRANSFER_PROVIDER') or self.get('provider.kind')

    @property
    def fixture_delay_seconds(self) -> float:
        return float(self.get('provider.fixture.delay_seconds', 0.0))

    @property
    def http_endpoint(self) -> str:
        """FX endpoint, overridable with MONEYTRANSFER_FX_ENDPOINT."""
        return (
            self.get_env('MONEYTRANSFER_FX_ENDPOINT')
            or self.get('provider.http.endpoint', 'https://my.transfergo.com/api/fx-rates')
        )

    @property
    def http_timeout(self) -> float:
        return float(self.get('provider.http.timeout', 10))

    def provider_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``get_provider(self.provider_kind, ...)``."""
        if self.provider_kind == 'http':
            return {'endpoint': self.http_endpoint, 'timeout': self.http_timeout}
        if self.provider_kind == 'fixture':
            return {'delay_seconds': self.fixture_delay_seconds}
        return {}

    @property
    def debounce_seconds(self) -> float:
        return float(self.get('converter.debounce_seconds', 0.5))

    @property
    def default_from(self) -> str:
        return self.get('converter.default_from', 'PLN')

    @property
    def default_to(self) -> str:
        return self.get('converter.default_to', 'UAH')

    @property
    def default_amount(self) -> str:
        return str(self.get('converter.default_amount', '100.00'))

    @property
    def security_policy(self) -> str:
        return self.get('security.policy', 'warn')

    @property
    def console_events(self) -> bool:
        return self.get('events.console.enabled', True)

    @property
    def print_parameters(self) -> bool:
        return self.get('events.console.print_parameters', True)

    @property
    def logging_events(self) -> bool:
        return self.get('events.logging.enabled', False)


def load_config(config_path: str = DEFAULT_CONFIG_PATH, configure_logging: bool = True) -> Config:
    """Load configuration from ``config_path``."""
    return Config(config_path, configure_logging=configure_logging)
