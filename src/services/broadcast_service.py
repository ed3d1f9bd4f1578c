"""
Broadcast Service - Centralized Socket.IO message broadcasting.

This service handles all Socket.IO emissions in a centralized way:
- Room-wide broadcasts
- Individual player messages
- Error reporting to a single connection
- Forced disconnection of ejected players
"""

import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = '/'


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio, error_response_factory):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
            error_response_factory: Factory building standardized error payloads
        """
        self.socketio = socketio
        self.error_response_factory = error_response_factory

    def emit_to_room(self, event: str, data: Dict[str, Any], room_id: str):
        """Emit an event to all players in a room."""
        try:
            self.socketio.emit(event, data, room=room_id)
            logger.debug(f'Emitted {event} to room {room_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to room {room_id}: {e}')

    def emit_to_player(self, event: str, data: Dict[str, Any], socket_id: str):
        """Emit an event to a specific player."""
        try:
            self.socketio.emit(event, data, room=socket_id)
            logger.debug(f'Emitted {event} to player {socket_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to player {socket_id}: {e}')

    def emit_error_to_player(self, error_response: Dict[str, Any], socket_id: str):
        """Emit an error message to a specific player."""
        try:
            self.socketio.emit('error', error_response, room=socket_id)
            logger.debug(f'Emitted error to player {socket_id}: {error_response.get("error", {}).get("code", "unknown")}')
        except Exception as e:
            logger.error(f'Error emitting error to player {socket_id}: {e}')

    def send_error(self, socket_id: str, error) -> None:
        """Report a ValidationError to the connection that caused it."""
        error_response = self.error_response_factory.create_error_response(error.code, error.message, error.details)
        self.emit_error_to_player(error_response, socket_id)

    def add_to_room(self, socket_id: str, room_id: str):
        """Subscribe a connection to a room's broadcasts."""
        try:
            self.socketio.server.enter_room(socket_id, room_id, namespace=DEFAULT_NAMESPACE)
            logger.debug(f'Client {socket_id} joined Socket.IO room: {room_id}')
        except Exception as e:
            logger.error(f'Error adding {socket_id} to room {room_id}: {e}')

    def remove_from_room(self, socket_id: str, room_id: str):
        """Unsubscribe a connection from a room's broadcasts."""
        try:
            self.socketio.server.leave_room(socket_id, room_id, namespace=DEFAULT_NAMESPACE)
            logger.debug(f'Client {socket_id} left Socket.IO room: {room_id}')
        except Exception as e:
            logger.error(f'Error removing {socket_id} from room {room_id}: {e}')

    def disconnect_player(self, socket_id: str):
        """Force-close a player's connection."""
        try:
            self.socketio.server.disconnect(socket_id, namespace=DEFAULT_NAMESPACE)
            logger.info(f'Force-disconnected client {socket_id}')
        except Exception as e:
            logger.error(f'Error disconnecting client {socket_id}: {e}')
