"""
Room State Presenter - Centralized room state transformation for broadcasts.

This service provides canonical transformations for room state data that needs
to be sent to clients, ensuring consistent payload shapes. Roles never appear in
room-wide payloads; they only travel in the individual roleAssigned message.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List

from src.core.models import Event, Player, Room
from src.core.ship import EndReason, SecretAction, ShipSystem

logger = logging.getLogger(__name__)

SYSTEM_SENDER = 'System'


class RoomStatePresenter:
    """Centralized service for transforming room state data for client broadcasts."""

    def __init__(self, broadcast_event_count: int = 5):
        """Initialize the room state presenter.

        Args:
            broadcast_event_count: Number of recent events included in game updates
        """
        self.broadcast_event_count = broadcast_event_count

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().isoformat()

    @staticmethod
    def systems(room: Room) -> Dict[str, int]:
        return {system.value: room.system_health[system] for system in ShipSystem}

    def create_player_list(self, players: List[Player]) -> List[Dict[str, Any]]:
        """Create a public player list (no roles or objectives)."""
        return [
            {
                'id': player.id,
                'name': player.display_name,
                'hasVoted': player.has_voted
            }
            for player in players
        ]

    def create_room_update(self, room: Room, players: List[Player]) -> Dict[str, Any]:
        """Payload for roomUpdated."""
        return {
            'roomId': room.id,
            'players': self.create_player_list(players),
            'gameStarted': room.started,
            'phase': room.phase.value
        }

    def create_room_summary(self, room: Room, players: List[Player]) -> Dict[str, Any]:
        """Full public room state, used for roomCreated, joinedRoom and gameStarted."""
        summary = self.create_room_update(room, players)
        summary.update({
            'systems': self.systems(room),
            'shipHealth': room.overall_health,
            'distance': room.clamped_distance(),
            'totalDistance': room.total_distance,
            'timeLeft': room.time_remaining,
            'events': [event.to_dict() for event in room.recent_events(self.broadcast_event_count)]
        })
        return summary

    def create_membership_response(self, room: Room, player: Player, players: List[Player]) -> Dict[str, Any]:
        """Payload for roomCreated / joinedRoom sent to the joining player."""
        return {
            'roomId': room.id,
            'playerId': player.id,
            'player': player.display_name,
            'room': self.create_room_summary(room, players)
        }

    def create_game_update(self, room: Room) -> Dict[str, Any]:
        """Per-tick snapshot; distance is clamped to the target here only."""
        return {
            'timeLeft': room.time_remaining,
            'distance': room.clamped_distance(),
            'totalDistance': room.total_distance,
            'systems': self.systems(room),
            'shipHealth': room.overall_health,
            'events': [event.to_dict() for event in room.recent_events(self.broadcast_event_count)]
        }

    def create_role_assignment(self, player: Player) -> Dict[str, Any]:
        return {
            'role': player.role.value if player.role else None,
            'objective': player.objective_text,
            'secret': f'Secret button: {player.secret_action_uses} uses'
        }

    def create_game_ended(self, room: Room, reason: EndReason, winners: List[Player]) -> Dict[str, Any]:
        return {
            'message': reason.message,
            'reason': reason.value,
            'winners': [player.display_name for player in winners],
            'finalStats': {
                'shipHealth': room.overall_health,
                'distance': room.distance_traveled,
                'systems': self.systems(room),
                'timeLeft': room.time_remaining
            }
        }

    def create_secret_button_used(self, player: Player, action: SecretAction, message: str) -> Dict[str, Any]:
        return {
            'player': player.display_name,
            'action': action.value,
            'message': message,
            'remainingUses': player.secret_action_uses
        }

    def create_system_repaired(self, system: ShipSystem, new_health: int, player: Player, is_technician: bool) -> Dict[str, Any]:
        return {
            'system': system.value,
            'newHealth': new_health,
            'repairedBy': player.display_name,
            'isTechnician': is_technician
        }

    def create_vote_casted(self, voter: Player, target: Player, votes: int, total_players: int) -> Dict[str, Any]:
        return {
            'voter': voter.display_name,
            'target': target.display_name,
            'votes': votes,
            'totalPlayers': total_players
        }

    def create_player_ejected(self, player: Player, votes: int) -> Dict[str, Any]:
        return {
            'player': player.display_name,
            'playerId': player.id,
            'votes': votes
        }

    def create_random_event(self, event: Event) -> Dict[str, Any]:
        return {
            'type': event.kind.value,
            'message': event.message
        }

    def create_chat_message(self, sender: str, message: str) -> Dict[str, Any]:
        return {
            'sender': sender,
            'message': message,
            'timestamp': self._timestamp()
        }

    def create_system_message(self, message: str) -> Dict[str, Any]:
        return self.create_chat_message(SYSTEM_SENDER, message)
