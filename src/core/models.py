"""
Room, Player and Event records.

Rooms reference players only by connection id; Player records are owned by the
PlayerRegistry and Room records by the RoomRegistry.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.core.ship import EventKind, Role, RoomPhase, ShipSystem

DEFAULT_SECRET_ACTION_USES = 3
DEFAULT_MISSION_DURATION = 15 * 60
DEFAULT_TOTAL_DISTANCE = 100
MAX_SYSTEM_HEALTH = 100


def default_display_name(player_id: str) -> str:
    return f"Player_{player_id[:4]}"


def full_system_health() -> Dict[ShipSystem, int]:
    return {system: MAX_SYSTEM_HEALTH for system in ShipSystem}


@dataclass(frozen=True)
class Event:
    """An immutable entry in a room's event log."""
    kind: EventKind
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    actor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'kind': self.kind.value,
            'message': self.message,
            'timestamp': self.timestamp.isoformat()
        }
        if self.actor is not None:
            data['actor'] = self.actor
        return data


@dataclass
class Player:
    """A connected player; `id` is the transport connection id."""
    id: str
    display_name: str = ''
    room_id: Optional[str] = None
    role: Optional[Role] = None
    objective_text: Optional[str] = None
    secret_action_uses: int = DEFAULT_SECRET_ACTION_USES
    has_voted: bool = False
    objective_completed: bool = False
    secret_data_collected: int = 0

    def __post_init__(self):
        if not self.display_name:
            self.display_name = default_display_name(self.id)

    def assign_role(self, role: Role, objective_text: str) -> None:
        self.role = role
        self.objective_text = objective_text

    def reset_for_new_game(self, secret_action_uses: int = DEFAULT_SECRET_ACTION_USES) -> None:
        self.role = None
        self.objective_text = None
        self.secret_action_uses = secret_action_uses
        self.has_voted = False
        self.objective_completed = False
        self.secret_data_collected = 0


@dataclass
class Room:
    """One game session: membership plus the simulated ship."""
    id: str
    member_ids: List[str] = field(default_factory=list)
    phase: RoomPhase = RoomPhase.LOBBY
    system_health: Dict[ShipSystem, int] = field(default_factory=full_system_health)
    overall_health: int = MAX_SYSTEM_HEALTH
    distance_traveled: float = 0.0
    total_distance: int = DEFAULT_TOTAL_DISTANCE
    time_remaining: int = DEFAULT_MISSION_DURATION
    event_log: List[Event] = field(default_factory=list)
    votes: Dict[str, str] = field(default_factory=dict)
    tick_task: Any = None
    reset_task: Any = None
    game_id: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def started(self) -> bool:
        return self.phase is RoomPhase.ACTIVE

    def has_member(self, player_id: str) -> bool:
        return player_id in self.member_ids

    def add_member(self, player_id: str) -> None:
        if player_id not in self.member_ids:
            self.member_ids.append(player_id)

    def remove_member(self, player_id: str) -> bool:
        if player_id in self.member_ids:
            self.member_ids.remove(player_id)
            return True
        return False

    def damage_system(self, system: ShipSystem, amount: int) -> int:
        self.system_health[system] = max(0, self.system_health[system] - amount)
        return self.system_health[system]

    def repair_system(self, system: ShipSystem, amount: int) -> int:
        self.system_health[system] = min(MAX_SYSTEM_HEALTH, self.system_health[system] + amount)
        return self.system_health[system]

    def recompute_overall_health(self) -> int:
        values = list(self.system_health.values())
        self.overall_health = sum(values) // len(values)
        return self.overall_health

    def append_event(self, event: Event, max_entries: int) -> bool:
        """Append to the log unless it already holds `max_entries` entries."""
        if len(self.event_log) >= max_entries:
            return False
        self.event_log.append(event)
        return True

    def recent_events(self, count: int) -> List[Event]:
        return self.event_log[-count:] if count > 0 else []

    def clamped_distance(self) -> float:
        return min(self.distance_traveled, self.total_distance)

    def reset_ship(self, mission_duration: int, total_distance: int) -> None:
        """Restore every mutable game field to its initial value."""
        self.phase = RoomPhase.LOBBY
        self.system_health = full_system_health()
        self.overall_health = MAX_SYSTEM_HEALTH
        self.distance_traveled = 0.0
        self.total_distance = total_distance
        self.time_remaining = mission_duration
        self.event_log = []
        self.votes = {}
        self.tick_task = None
        self.reset_task = None
