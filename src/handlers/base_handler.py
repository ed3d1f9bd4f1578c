"""
Base Handler Classes

This module provides base classes for Socket.IO handlers with common patterns
for service access, payload validation and logging.
"""

import logging
from abc import ABC
from typing import Any, Dict, Optional, Tuple
from flask import request

from container import get_container

logger = logging.getLogger(__name__)


class BaseHandler(ABC):
    """
    Abstract base class for all Socket.IO handlers.

    Services are resolved from the container on each access so handlers always
    see the currently configured instances.
    """

    @property
    def _container(self):
        return get_container()

    @property
    def controller(self):
        """Get the room lifecycle controller."""
        return self._container.get('RoomLifecycleController')

    @property
    def validation_service(self):
        """Get the validation service."""
        return self._container.get('ValidationService')

    @property
    def error_response_factory(self):
        """Get the error response factory service."""
        return self._container.get('ErrorResponseFactory')

    @property
    def current_sid(self) -> str:
        return request.sid  # type: ignore[attr-defined]

    def payload(self, data: Any, field: str) -> Dict[str, Any]:
        """Normalize the event payload; a bare value is stored under `field`."""
        return self.validation_service.coerce_payload(data, field)

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {self.current_sid}')
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: Optional[str] = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {self.current_sid}'
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)


class ValidationHandlerMixin:
    """
    Mixin for handlers that need common validation patterns.

    Provides standardized extraction of the fields used across handlers.
    """

    validation_service: Any

    def payload(self, data: Any, field: str) -> Dict[str, Any]:
        """Expected to be implemented by BaseHandler"""
        raise NotImplementedError("This method should be provided by BaseHandler")

    def validate_join_data(self, data: Any) -> Tuple[str, Optional[str]]:
        """
        Validate room join data and extract room id and display name.

        Returns:
            Tuple of (room_id, player_name or None)
        """
        validated = self.payload(data, 'roomId')
        room_id = self.validation_service.validate_room_id(validated.get('roomId'))
        player_name = self.validate_name_field(validated)
        return room_id, player_name

    def validate_name_field(self, validated: Dict[str, Any]) -> Optional[str]:
        """Extract the display name; `username` is accepted as an alias."""
        return self.validation_service.validate_player_name(validated.get('name', validated.get('username')))

    def validate_vote_data(self, data: Any) -> str:
        """Extract the vote target; `targetPlayerId` is accepted as an alias."""
        validated = self.payload(data, 'targetId')
        target_id = validated.get('targetId', validated.get('targetPlayerId'))
        return self.validation_service.validate_target_id(target_id)


class BaseRoomHandler(BaseHandler, ValidationHandlerMixin):
    """Base class for handlers that deal with room membership."""
    pass


class BaseGameHandler(BaseHandler, ValidationHandlerMixin):
    """Base class for handlers that deal with game actions."""
    pass
