"""
Socket.IO event handlers for Starship Saboteur.

This module provides the main registration function and the connection and
disconnection handlers. Game events are routed through the SocketEventRouter.
"""

import logging
from flask import request
from flask_socketio import emit

from container import get_container
from .socket_event_router import setup_router
from .room_connection_handler import RoomConnectionHandler
from .game_action_handler import GameActionHandler

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio_instance, config=None):
    """Register all socket handlers with the SocketIO instance."""
    config = config or {}
    router = setup_router()

    room_handler = RoomConnectionHandler()
    game_handler = GameActionHandler()

    # Connection lifecycle events bypass the router
    socketio_instance.on_event('connect', _make_connect_handler(config.get('app_config'),
                                                                config.get('allowed_origins_env', '')))
    socketio_instance.on_event('disconnect', handle_disconnect)

    # Room membership
    router.register_route('createRoom', room_handler.handle_create_room)
    router.register_route('joinRoom', room_handler.handle_join_room)
    router.register_route('leaveRoom', room_handler.handle_leave_room)

    # Game actions
    router.register_route('startGame', game_handler.handle_start_game)
    router.register_route('useSecretButton', game_handler.handle_use_secret_button)
    router.register_route('repairSystem', game_handler.handle_repair_system)
    router.register_route('castVote', game_handler.handle_cast_vote)
    router.register_route('sendChat', game_handler.handle_send_chat)

    router.register_with_socketio(socketio_instance)

    logger.info(f"Registered {len(router.get_registered_events())} socket event handlers")
    return router


def _make_connect_handler(app_config, allowed_origins_env: str):
    def handle_connect(auth=None):
        """Handle client connection with optional Origin enforcement in production."""
        origin = request.headers.get('Origin')
        # Enforce Origin in production if a CORS allowlist is configured
        if app_config is not None and app_config.is_production and allowed_origins_env:
            allowed = {o.strip() for o in allowed_origins_env.split(',') if o.strip()}
            if origin and origin not in allowed:
                logger.warning(f'Rejecting connection from disallowed Origin: {origin}')
                return False
        logger.info(f'Client connected: {request.sid} from Origin: {origin}')  # type: ignore[attr-defined]
        emit('connected', {'status': 'Connected to Starship Saboteur server', 'playerId': request.sid})  # type: ignore[attr-defined]
    return handle_connect


def handle_disconnect(reason=None):
    """Handle client disconnection; leaving is implicit."""
    sid = request.sid  # type: ignore[attr-defined]
    logger.info(f'Client disconnected: {sid}')
    try:
        get_container().get('RoomLifecycleController').handle_disconnect(sid)
    except Exception as e:
        logger.error(f'Error cleaning up after {sid}: {e}')

