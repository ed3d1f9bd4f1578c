"""
Room Registry for Starship Saboteur

Handles room creation, lookup and deletion, and generates short room codes.
"""

import logging
import random
import string
import threading
from typing import Dict, List, Optional

from src.core.errors import ErrorCode, ValidationError
from src.core.models import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Manages room creation, deletion, and lookup."""

    ROOM_ID_LENGTH = 5
    ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits
    MAX_ID_ATTEMPTS = 100

    def __init__(self, rng: Optional[random.Random] = None):
        self._rooms: Dict[str, Room] = {}
        self._rooms_lock = threading.RLock()
        self._rng = rng or random.Random()

    def generate_room_id(self) -> str:
        return ''.join(self._rng.choice(self.ROOM_ID_ALPHABET) for _ in range(self.ROOM_ID_LENGTH))

    def create(self, mission_duration: int, total_distance: int, room_id: Optional[str] = None) -> Room:
        """
        Create a new room in the lobby phase.

        Args:
            mission_duration: Seconds on the clock at game start
            total_distance: Distance the ship must travel
            room_id: Explicit id; a fresh code is generated when omitted

        Returns:
            The new Room

        Raises:
            ValueError: If an explicit room id already exists or no free code was found
        """
        with self._rooms_lock:
            if room_id is None:
                room_id = self._next_free_id()
            elif room_id in self._rooms:
                raise ValueError(f"Room {room_id} already exists")

            room = Room(id=room_id, time_remaining=mission_duration, total_distance=total_distance)
            self._rooms[room_id] = room
            logger.info(f"Created room {room_id}")
            return room

    def _next_free_id(self) -> str:
        for _ in range(self.MAX_ID_ATTEMPTS):
            candidate = self.generate_room_id()
            if candidate not in self._rooms:
                return candidate
        raise ValueError("Could not generate a free room id")

    def get(self, room_id: str) -> Room:
        """
        Get a room by id.

        Raises:
            ValidationError: ROOM_NOT_FOUND if the room does not exist
        """
        room = self.find(room_id)
        if room is None:
            raise ValidationError(
                ErrorCode.ROOM_NOT_FOUND,
                f'Room {room_id} not found',
                {'room_id': room_id}
            )
        return room

    def find(self, room_id: str) -> Optional[Room]:
        with self._rooms_lock:
            return self._rooms.get(room_id)

    def exists(self, room_id: str) -> bool:
        with self._rooms_lock:
            return room_id in self._rooms

    def remove(self, room_id: str) -> Optional[Room]:
        """
        Delete a room.

        Returns:
            The removed Room, or None if it did not exist
        """
        with self._rooms_lock:
            room = self._rooms.pop(room_id, None)
        if room is not None:
            logger.info(f"Deleted room {room_id}")
        return room

    def all_ids(self) -> List[str]:
        with self._rooms_lock:
            return list(self._rooms.keys())

    def count(self) -> int:
        with self._rooms_lock:
            return len(self._rooms)

    def clear(self) -> None:
        with self._rooms_lock:
            self._rooms.clear()
