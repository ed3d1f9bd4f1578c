"""
Game Action Handler

This module handles Socket.IO events related to game actions:
starting the game, secret sabotage, repairs, ejection votes and chat.
"""

import logging

from src.services.error_response_factory import with_error_handling
from .base_handler import BaseGameHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseGameHandler):
    """Handler for in-game player actions."""

    @with_error_handling
    def handle_start_game(self, data=None):
        """Start the game in the requesting player's room."""
        self.log_handler_start('handle_start_game', data)

        room = self.controller.start_game(self.current_sid)

        self.log_handler_success('handle_start_game', f'Game {room.game_id} started in room {room.id}')

    @with_error_handling
    def handle_use_secret_button(self, data=None):
        """
        Handle a press of the secret button.

        Expected data format:
        {
            'action': 'lights' | 'engine' | 'door' | 'hack',
            'target': 'optional free-form target'
        }
        """
        self.log_handler_start('handle_use_secret_button', data)

        validated = self.payload(data, 'action')
        action = self.controller.use_secret_action(
            self.current_sid, validated.get('action'), validated.get('target')
        )

        self.log_handler_success('handle_use_secret_button', f'Action {action.value}')

    @with_error_handling
    def handle_repair_system(self, data):
        """
        Handle a repair request.

        Expected data format:
        {
            'system': 'Engine'         # a bare string is accepted too
        }
        """
        self.log_handler_start('handle_repair_system', data)

        validated = self.payload(data, 'system')
        system_name = self.validation_service.validate_system_name(validated.get('system'))
        new_health = self.controller.repair_system(self.current_sid, system_name)

        self.log_handler_success('handle_repair_system', f'{system_name} now at {new_health}')

    @with_error_handling
    def handle_cast_vote(self, data):
        """
        Handle an ejection vote.

        Expected data format:
        {
            'targetId': 'connection id of the target'
        }
        """
        self.log_handler_start('handle_cast_vote', data)

        target_id = self.validate_vote_data(data)
        receipt = self.controller.cast_vote(self.current_sid, target_id)

        self.log_handler_success(
            'handle_cast_vote', f'{receipt.votes_cast}/{receipt.total_players} votes cast'
        )

    @with_error_handling
    def handle_send_chat(self, data):
        """Relay a chat message to the sender's room."""
        self.log_handler_start('handle_send_chat', data)

        validated = self.payload(data, 'message')
        message = self.validation_service.validate_chat_message(validated.get('message'))
        self.controller.send_chat(self.current_sid, message)
