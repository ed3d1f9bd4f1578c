"""
Game Settings Configuration Module

Provides centralized access to game-specific configuration values,
replacing hardcoded constants throughout the codebase.
"""

import logging

logger = logging.getLogger(__name__)


class GameSettings:
    """Centralized game settings management."""

    def __init__(self, app_config=None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
        """
        self._config = app_config
        if app_config is None:
            from config_factory import ConfigError, get_config
            try:
                self._config = get_config()
            except ConfigError as e:
                logger.warning(f"Could not load configuration: {e}, using defaults")
                self._config = None

    def _get(self, name: str, default):
        if self._config is None:
            return default
        return getattr(self._config, name, default)

    @property
    def max_players_per_room(self) -> int:
        """Maximum players allowed per room."""
        return self._get('max_players_per_room', 10)

    @property
    def min_players_required(self) -> int:
        """Minimum players required to start or continue a game."""
        return self._get('min_players_required', 2)

    @property
    def max_player_name_length(self) -> int:
        return self._get('max_player_name_length', 20)

    @property
    def max_chat_length(self) -> int:
        return self._get('max_chat_length', 300)

    @property
    def tick_interval(self) -> float:
        """
        Get the simulation tick interval in seconds.

        Returns:
            Seconds between two simulation steps
        """
        return self._get('tick_interval_seconds', 1.0)

    @property
    def mission_duration(self) -> int:
        """Seconds on the clock when a game starts."""
        return self._get('mission_duration_seconds', 900)

    @property
    def total_distance(self) -> int:
        return self._get('total_distance', 100)

    @property
    def reset_delay(self) -> int:
        """
        Get the delay between a game ending and the room returning to the lobby.

        Returns:
            Delay in seconds
        """
        return self._get('reset_delay_seconds', 30)

    @property
    def secret_action_uses(self) -> int:
        return self._get('secret_action_uses', 3)

    @property
    def max_event_log(self) -> int:
        return self._get('max_event_log', 10)

    @property
    def broadcast_event_count(self) -> int:
        return self._get('broadcast_event_count', 5)


# Global instance for easy access
_game_settings_instance = None


def get_game_settings(app_config=None) -> GameSettings:
    """
    Get or create the global game settings instance.

    Args:
        app_config: Optional app config to use

    Returns:
        GameSettings instance
    """
    global _game_settings_instance

    if _game_settings_instance is None or app_config is not None:
        _game_settings_instance = GameSettings(app_config)

    return _game_settings_instance


def reset_game_settings():
    """Reset the global game settings instance (mainly for testing)."""
    global _game_settings_instance
    _game_settings_instance = None
