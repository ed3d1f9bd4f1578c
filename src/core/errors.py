"""
Core error definitions for Starship Saboteur

Provides error kinds, error codes and the validation exception raised by the
engine. Nothing here depends on other services.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorKind(Enum):
    """Broad error categories reported to clients."""
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY = "CAPACITY"
    INVALID_INPUT = "INVALID_INPUT"
    INTERNAL = "INTERNAL"


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Payload errors
    INVALID_DATA = "INVALID_DATA"
    MISSING_ROOM_ID = "MISSING_ROOM_ID"
    INVALID_ROOM_ID = "INVALID_ROOM_ID"
    PLAYER_NAME_TOO_LONG = "PLAYER_NAME_TOO_LONG"
    INVALID_SYSTEM = "INVALID_SYSTEM"
    MISSING_TARGET = "MISSING_TARGET"
    EMPTY_MESSAGE = "EMPTY_MESSAGE"
    MESSAGE_TOO_LONG = "MESSAGE_TOO_LONG"

    # Lookup errors
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    NOT_IN_ROOM = "NOT_IN_ROOM"
    INVALID_TARGET = "INVALID_TARGET"

    # State machine errors
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    GAME_ENDING = "GAME_ENDING"
    INSUFFICIENT_PLAYERS = "INSUFFICIENT_PLAYERS"
    ALREADY_VOTED = "ALREADY_VOTED"
    NO_SECRET_USES = "NO_SECRET_USES"

    # Capacity errors
    ROOM_FULL = "ROOM_FULL"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def kind(self) -> ErrorKind:
        return _CODE_KINDS.get(self, ErrorKind.INTERNAL)


_CODE_KINDS: Dict[ErrorCode, ErrorKind] = {
    ErrorCode.INVALID_DATA: ErrorKind.INVALID_INPUT,
    ErrorCode.MISSING_ROOM_ID: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_ROOM_ID: ErrorKind.INVALID_INPUT,
    ErrorCode.PLAYER_NAME_TOO_LONG: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_SYSTEM: ErrorKind.INVALID_INPUT,
    ErrorCode.MISSING_TARGET: ErrorKind.INVALID_INPUT,
    ErrorCode.EMPTY_MESSAGE: ErrorKind.INVALID_INPUT,
    ErrorCode.MESSAGE_TOO_LONG: ErrorKind.INVALID_INPUT,
    ErrorCode.ROOM_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.NOT_IN_ROOM: ErrorKind.NOT_FOUND,
    ErrorCode.INVALID_TARGET: ErrorKind.NOT_FOUND,
    ErrorCode.ALREADY_IN_ROOM: ErrorKind.INVALID_STATE,
    ErrorCode.GAME_ALREADY_STARTED: ErrorKind.INVALID_STATE,
    ErrorCode.GAME_NOT_STARTED: ErrorKind.INVALID_STATE,
    ErrorCode.GAME_ENDING: ErrorKind.INVALID_STATE,
    ErrorCode.INSUFFICIENT_PLAYERS: ErrorKind.INVALID_STATE,
    ErrorCode.ALREADY_VOTED: ErrorKind.INVALID_STATE,
    ErrorCode.NO_SECRET_USES: ErrorKind.INVALID_STATE,
    ErrorCode.ROOM_FULL: ErrorKind.CAPACITY,
    ErrorCode.INTERNAL_ERROR: ErrorKind.INTERNAL,
}


class ValidationError(Exception):
    """Raised for any rejected request; reported to the originating client."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind
