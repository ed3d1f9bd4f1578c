"""
Room Connection Handler

This module handles Socket.IO events related to room membership:
creating rooms, joining rooms and leaving rooms.
"""

import logging

from src.services.error_response_factory import with_error_handling
from .base_handler import BaseRoomHandler

logger = logging.getLogger(__name__)


class RoomConnectionHandler(BaseRoomHandler):
    """Handler for room membership operations like create, join and leave."""

    @with_error_handling
    def handle_create_room(self, data=None):
        """
        Handle a player creating a new room.

        Expected data format:
        {
            'name': 'display_name'     # optional, a bare string is accepted too
        }
        """
        self.log_handler_start('handle_create_room', data)

        validated = self.payload(data, 'name')
        player_name = self.validate_name_field(validated)

        room, player = self.controller.create_room(self.current_sid, player_name)

        self.log_handler_success('handle_create_room', f'Player {player.display_name} created room {room.id}')

    @with_error_handling
    def handle_join_room(self, data):
        """
        Handle player joining a room.

        Expected data format:
        {
            'roomId': 'ABC12',
            'name': 'display_name'     # optional
        }
        """
        self.log_handler_start('handle_join_room', data)

        room_id, player_name = self.validate_join_data(data)

        room, player = self.controller.join_room(self.current_sid, room_id, player_name)

        self.log_handler_success('handle_join_room', f'Player {player.display_name} joined room {room.id}')

    @with_error_handling
    def handle_leave_room(self, data=None):
        """Handle player leaving their current room."""
        self.log_handler_start('handle_leave_room', data)

        room_id = self.controller.leave_room(self.current_sid)

        self.log_handler_success('handle_leave_room', f'Left room {room_id}')
