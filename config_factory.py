"""
Configuration Factory - Centralized configuration management for Starship Saboteur

Every setting lives on the AppConfig dataclass and may be overridden by an
environment variable named after it in upper case (MAX_PLAYERS_PER_ROOM, ...).
"""

import os
import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional

DEV_SECRET_KEY = 'dev-secret-key-change-in-production'


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


# Inclusive bounds checked on every load and override
SETTING_RANGES = {
    'port': (1, 65535),
    'max_players_per_room': (2, 50),
    'max_player_name_length': (1, 100),
    'max_chat_length': (1, 5000),
    'mission_duration_seconds': (1, 24 * 3600),
    'reset_delay_seconds': (0, 3600),
    'secret_action_uses': (0, 100),
}


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Flask
    secret_key: str = DEV_SECRET_KEY
    debug: bool = False
    flask_env: str = 'development'

    # Server
    host: str = '0.0.0.0'
    port: int = 3000

    # Rooms
    max_players_per_room: int = 10
    min_players_required: int = 2
    max_player_name_length: int = 20
    max_chat_length: int = 300

    # Simulation
    tick_interval_seconds: float = 1.0
    mission_duration_seconds: int = 900
    total_distance: int = 100
    reset_delay_seconds: int = 30
    secret_action_uses: int = 3
    max_event_log: int = 10
    broadcast_event_count: int = 5

    content_file: str = 'ship_content.yaml'

    # Gunicorn
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2
    log_level: str = 'info'

    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        self._validate()

    def _validate(self):
        for name, (low, high) in SETTING_RANGES.items():
            value = getattr(self, name)
            if value < low or value > high:
                raise ConfigError(f"Invalid {name}: {value}")

        if self.min_players_required < 2 or self.min_players_required > self.max_players_per_room:
            raise ConfigError(f"Invalid min_players_required: {self.min_players_required}")

        if self.tick_interval_seconds <= 0 or self.tick_interval_seconds > 60:
            raise ConfigError(f"Invalid tick_interval_seconds: {self.tick_interval_seconds}")

        if self.total_distance < 1:
            raise ConfigError(f"Invalid total_distance: {self.total_distance}")

        if self.max_event_log < 1:
            raise ConfigError(f"Invalid max_event_log: {self.max_event_log}")

        # Game updates carry a slice of the event log
        if self.broadcast_event_count < 0 or self.broadcast_event_count > self.max_event_log:
            raise ConfigError(f"Invalid broadcast_event_count: {self.broadcast_event_count}")

        if self.environment == Environment.PRODUCTION and self.secret_key == DEV_SECRET_KEY:
            raise ConfigError("Production environment requires a secure SECRET_KEY")

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


def _environment_for(flask_env: str) -> Environment:
    if flask_env == 'development':
        return Environment.DEVELOPMENT
    if flask_env == 'testing':
        return Environment.TESTING
    return Environment.PRODUCTION


class ConfigurationFactory:
    """
    Singleton that loads, overrides and exposes the application configuration.
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[AppConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def _read_env(self, env_key: str, default: Any) -> Any:
        """Read one variable, converted to the type of its default"""
        value = os.environ.get(env_key)
        if value is None:
            return default

        var_type = type(default)
        if var_type == bool:
            return value.lower() in ('true', '1', 'yes', 'on')
        if var_type in (int, float):
            try:
                return var_type(value)
            except ValueError:
                self._logger.warning(f"Invalid {var_type.__name__} value for {env_key}: {value}, using default: {default}")
                return default
        return value

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'SABOTEUR_')

        Returns:
            Configured AppConfig instance
        """
        flask_env = os.environ.get(f'{env_prefix}FLASK_ENV', 'development')
        environment = _environment_for(flask_env)

        values: Dict[str, Any] = {}
        for field_info in fields(AppConfig):
            if field_info.name in ('environment', 'flask_env'):
                continue
            default = field_info.default
            if field_info.name == 'debug':
                default = environment != Environment.PRODUCTION
            values[field_info.name] = self._read_env(f'{env_prefix}{field_info.name.upper()}', default)

        config = AppConfig(flask_env=flask_env, environment=environment, **values)

        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)

        self._config = config
        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> AppConfig:
        """Load configuration from a dictionary (useful for testing)."""
        config_dict = dict(config_dict)
        if isinstance(config_dict.get('environment'), str):
            config_dict['environment'] = Environment(config_dict['environment'])

        self._config = AppConfig(**config_dict)
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """Override one setting now and on every later load."""
        self._env_overrides[key] = value

        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()

        return self

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary of the current configuration; enums become their values."""
        config = self.get_config()
        return {
            field_info.name: (value.value if isinstance(value, Environment) else value)
            for field_info in fields(config)
            for value in (getattr(config, field_info.name),)
        }

    def get_flask_config(self) -> Dict[str, Any]:
        """Settings for Flask's app.config.update()"""
        config = self.get_config()
        return {
            'SECRET_KEY': config.secret_key,
            'DEBUG': config.debug,
            'ENV': config.flask_env,
            'MAX_PLAYERS_PER_ROOM': config.max_players_per_room,
            'MISSION_DURATION_SECONDS': config.mission_duration_seconds,
            'CONTENT_FILE': config.content_file,
        }


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> AppConfig:
    """Get the global application configuration"""
    return _config_factory.get_config()


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
