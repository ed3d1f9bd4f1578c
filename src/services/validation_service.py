"""
Validation Service for Starship Saboteur

Provides input validation and sanitization of client payloads, separated from
error response handling. Game rules are enforced by the engine, not here.
"""

import logging
import re
from typing import Any, Dict, Optional

from src.config.game_settings import get_game_settings
from src.core.errors import ErrorCode, ValidationError

logger = logging.getLogger(__name__)


class ValidationService:
    """Service responsible for input validation and sanitization."""

    # Room codes are 5 upper-case letters or digits
    ROOM_ID_PATTERN = re.compile(r'^[A-Z0-9]{5}$')

    def __init__(self, game_settings=None):
        self._game_settings = game_settings

    @property
    def game_settings(self):
        if self._game_settings is None:
            self._game_settings = get_game_settings()
        return self._game_settings

    def coerce_payload(self, data: Any, field: str) -> Dict[str, Any]:
        """
        Normalize an event payload into a dictionary.

        Clients may send either an object or the bare value of its main field.

        Args:
            data: Raw payload from the Socket.IO event
            field: Field name a bare scalar is stored under

        Returns:
            Payload dictionary

        Raises:
            ValidationError: If the payload is neither an object nor a scalar
        """
        if data is None:
            return {}
        if isinstance(data, dict):
            return data
        if isinstance(data, (str, int, float)) and not isinstance(data, bool):
            return {field: data}
        raise ValidationError(
            ErrorCode.INVALID_DATA,
            "Invalid data format - expected object"
        )

    def validate_room_id(self, room_id: Any) -> str:
        """
        Validate and normalize a room code.

        Raises:
            ValidationError: If the room code is missing or malformed
        """
        if not room_id or not isinstance(room_id, str):
            raise ValidationError(
                ErrorCode.MISSING_ROOM_ID,
                "Room ID is required"
            )

        room_id = room_id.strip().upper()

        if not room_id:
            raise ValidationError(
                ErrorCode.MISSING_ROOM_ID,
                "Room ID cannot be empty"
            )

        if not self.ROOM_ID_PATTERN.match(room_id):
            raise ValidationError(
                ErrorCode.INVALID_ROOM_ID,
                "Room ID must be 5 letters or digits",
                {"room_id": room_id}
            )

        return room_id

    def validate_player_name(self, player_name: Any) -> Optional[str]:
        """
        Validate an optional display name.

        Returns:
            The stripped name, or None when the client did not pick one

        Raises:
            ValidationError: If the name is too long
        """
        if player_name is None:
            return None
        if not isinstance(player_name, str):
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                "Player name must be a string"
            )

        player_name = re.sub(r'\s+', ' ', player_name.strip())
        if not player_name:
            return None

        max_length = self.game_settings.max_player_name_length
        if len(player_name) > max_length:
            raise ValidationError(
                ErrorCode.PLAYER_NAME_TOO_LONG,
                f"Player name must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(player_name)}
            )

        return player_name

    def validate_target_id(self, target_id: Any) -> str:
        if not target_id or not isinstance(target_id, str):
            raise ValidationError(
                ErrorCode.MISSING_TARGET,
                "A target player is required"
            )
        return target_id

    def validate_system_name(self, system_name: Any) -> str:
        """Only the type is checked here; the engine resolves the name to a system."""
        if not system_name or not isinstance(system_name, str):
            raise ValidationError(
                ErrorCode.INVALID_SYSTEM,
                "A system name is required"
            )
        return system_name.strip()

    def validate_chat_message(self, message: Any) -> str:
        """
        Validate a chat line.

        Raises:
            ValidationError: If the message is empty or too long
        """
        if isinstance(message, str):
            # Control characters except newlines and tabs
            message = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', message).strip()

        if not isinstance(message, str) or not message:
            raise ValidationError(
                ErrorCode.EMPTY_MESSAGE,
                "Message cannot be empty"
            )

        max_length = self.game_settings.max_chat_length
        if len(message) > max_length:
            raise ValidationError(
                ErrorCode.MESSAGE_TOO_LONG,
                f"Message must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(message)}
            )

        return message
