"""
Ship Enumerations

Defines the fixed role, ship system, secret action, event and phase sets used
throughout the engine. Effects are attached to the enum members themselves so
callers dispatch on the member rather than on raw strings.
"""

from enum import Enum
from typing import NamedTuple, Optional


class Role(Enum):
    """Hidden roles handed out at game start."""
    CAPTAIN = "Captain"
    TECHNICIAN = "Technician"
    SPY = "Spy"
    AI = "AI"
    SABOTEUR = "Saboteur"


class ShipSystem(Enum):
    """Ship subsystems tracked per room."""
    ENGINE = "Engine"
    OXYGEN = "Oxygen"
    NAVIGATION = "Navigation"
    SHIELD = "Shield"
    COMMUNICATION = "Communication"

    @classmethod
    def from_name(cls, name: str) -> Optional['ShipSystem']:
        for system in cls:
            if system.value == name:
                return system
        return None


class SystemEffect(NamedTuple):
    system: Optional[ShipSystem]
    health_change: int


class SecretAction(Enum):
    """Limited-use sabotage actions available to every player."""
    LIGHTS = "lights"
    ENGINE = "engine"
    DOOR = "door"
    HACK = "hack"

    @property
    def effect(self) -> SystemEffect:
        if self is SecretAction.ENGINE:
            return SystemEffect(ShipSystem.ENGINE, -20)
        if self is SecretAction.DOOR:
            return SystemEffect(ShipSystem.OXYGEN, -15)
        if self is SecretAction.HACK:
            return SystemEffect(ShipSystem.NAVIGATION, -25)
        return SystemEffect(None, 0)

    @classmethod
    def parse(cls, value) -> 'SecretAction':
        """Map a client supplied action name to a member; unknown names fall back to lights."""
        for action in cls:
            if action.value == value:
                return action
        return cls.LIGHTS


class EventKind(Enum):
    """Kinds of entries in a room's event log."""
    METEOR = "meteor"
    RADIATION = "radiation"
    ALIEN = "alien"
    SYSTEM_FAILURE = "system_failure"
    SECRET_ACTION = "secret_action"


# Events the tick loop may draw at random
RANDOM_EVENT_KINDS = (
    EventKind.METEOR,
    EventKind.RADIATION,
    EventKind.ALIEN,
    EventKind.SYSTEM_FAILURE,
)


class RoomPhase(Enum):
    """Room state machine phases."""
    LOBBY = "lobby"
    ACTIVE = "active"
    ENDING = "ending"


class EndReason(Enum):
    """Why a game ended."""
    TIME_OUT = "time_out"
    ARRIVED = "arrived"
    DESTROYED = "destroyed"
    TOO_FEW_PLAYERS = "too_few_players"

    @property
    def message(self) -> str:
        if self is EndReason.TIME_OUT:
            return "Time's up! The ship did not reach its destination."
        if self is EndReason.ARRIVED:
            return "The ship reached its destination!"
        if self is EndReason.DESTROYED:
            return "The ship was destroyed! All systems failed."
        return "Game over: too few players."
