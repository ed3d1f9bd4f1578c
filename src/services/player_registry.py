"""
Player Registry - Owns every Player record, keyed by connection id.

This service handles:
- Player creation when a connection creates or joins a room
- Lookup by connection id
- Idempotent removal on leave, disconnect or ejection
"""

import logging
import threading
from typing import Dict, List, Optional

from src.core.errors import ErrorCode, ValidationError
from src.core.models import Player

logger = logging.getLogger(__name__)


class PlayerRegistry:
    """Thread-safe map of connection id -> Player."""

    def __init__(self):
        self._players: Dict[str, Player] = {}
        self._lock = threading.RLock()
        logger.info("PlayerRegistry initialized")

    def create(self, player_id: str, display_name: Optional[str], room_id: str,
               secret_action_uses: int = 3) -> Player:
        """Create a Player record for a connection.

        Args:
            player_id: Connection identifier
            display_name: Requested name; a default derived from the id is used if empty
            room_id: Room the player belongs to
            secret_action_uses: Starting secret action budget

        Returns:
            The new Player

        Raises:
            ValidationError: If the connection already owns a Player record
        """
        with self._lock:
            if player_id in self._players:
                raise ValidationError(
                    ErrorCode.ALREADY_IN_ROOM,
                    'You are already in a room. Leave it first.'
                )
            player = Player(
                id=player_id,
                display_name=display_name or '',
                room_id=room_id,
                secret_action_uses=secret_action_uses
            )
            self._players[player_id] = player
            logger.debug(f"Created player {player.display_name} ({player_id}) in room {room_id}")
            return player

    def get(self, player_id: str) -> Player:
        """Get a Player, raising NOT_IN_ROOM if the connection has no record."""
        player = self.find(player_id)
        if player is None:
            raise ValidationError(
                ErrorCode.NOT_IN_ROOM,
                'You are not currently in a room'
            )
        return player

    def find(self, player_id: str) -> Optional[Player]:
        with self._lock:
            return self._players.get(player_id)

    def exists(self, player_id: str) -> bool:
        with self._lock:
            return player_id in self._players

    def remove(self, player_id: str) -> Optional[Player]:
        """Remove a Player record; repeated calls are no-ops.

        Returns:
            The removed Player or None if there was none
        """
        with self._lock:
            player = self._players.pop(player_id, None)
        if player:
            logger.debug(f"Removed player {player.display_name} ({player_id})")
        return player

    def get_many(self, player_ids: List[str]) -> List[Player]:
        """Get the Players for the given ids in order, skipping unknown ids."""
        with self._lock:
            return [self._players[pid] for pid in player_ids if pid in self._players]

    def count(self) -> int:
        with self._lock:
            return len(self._players)

    def clear(self) -> None:
        with self._lock:
            self._players.clear()
