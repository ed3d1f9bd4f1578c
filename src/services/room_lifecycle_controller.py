"""
Room Lifecycle Controller - The orchestrating surface of the game engine.

This service handles:
- Room creation, joining, leaving and disconnect cleanup
- Game start (role assignment, tick task) and game end (objective evaluation, reset)
- Player actions: secret sabotage, repairs, votes and chat
- Every broadcast the engine sends

Room states: lobby -> active -> ending -> lobby, or destroyed once the last
member is gone. All room mutation happens with the room's lock held.
"""

import logging
import random
from functools import partial
from typing import List, Optional, Tuple

from src.config.game_settings import get_game_settings
from src.core.errors import ErrorCode, ValidationError
from src.core.models import Event, Player, Room
from src.core.ship import EndReason, EventKind, Role, RoomPhase, SecretAction, ShipSystem
from src.services.objective_evaluator import evaluate_objective
from src.services.role_assigner import assign_roles
from src.services.room_state_presenter import RoomStatePresenter

logger = logging.getLogger(__name__)

TECHNICIAN_REPAIR_AMOUNT = 35
DEFAULT_REPAIR_AMOUNT = 15


class RoomLifecycleController:
    """Coordinates registries, simulation and voting for every room."""

    def __init__(self, room_registry, player_registry, concurrency_control, vote_tally,
                 tick_simulator, broadcast_service, content_manager, scheduler,
                 rng: Optional[random.Random] = None, game_settings=None):
        self.room_registry = room_registry
        self.player_registry = player_registry
        self.concurrency_control = concurrency_control
        self.vote_tally = vote_tally
        self.tick_simulator = tick_simulator
        self.broadcast_service = broadcast_service
        self.content_manager = content_manager
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.game_settings = game_settings or get_game_settings()
        self.presenter = RoomStatePresenter(self.game_settings.broadcast_event_count)

        logger.info("RoomLifecycleController initialized")

    # Lookups

    def get_room(self, room_id: str) -> Room:
        return self.room_registry.get(room_id)

    def get_player(self, player_id: str) -> Player:
        return self.player_registry.get(player_id)

    def _room_members(self, room: Room) -> List[Player]:
        return self.player_registry.get_many(room.member_ids)

    @staticmethod
    def _room_id_of(player: Player) -> str:
        if player.room_id is None:
            raise ValidationError(ErrorCode.NOT_IN_ROOM, 'You are not currently in a room')
        return player.room_id

    def _require_room_of(self, player: Player) -> Room:
        if player.room_id is None:
            raise ValidationError(ErrorCode.NOT_IN_ROOM, 'You are not currently in a room')
        room = self.room_registry.get(player.room_id)
        if not room.has_member(player.id):
            raise ValidationError(ErrorCode.NOT_IN_ROOM, 'You are not currently in a room')
        return room

    def _require_active(self, room: Room) -> None:
        if not room.started:
            raise ValidationError(ErrorCode.GAME_NOT_STARTED, 'The game has not started yet')

    # Broadcast helpers

    def _broadcast_room_update(self, room: Room) -> None:
        payload = self.presenter.create_room_update(room, self._room_members(room))
        self.broadcast_service.emit_to_room('roomUpdated', payload, room.id)

    def _system_message(self, room_id: str, message: str) -> None:
        self.broadcast_service.emit_to_room('chatMessage', self.presenter.create_system_message(message), room_id)

    # Membership

    def create_room(self, player_id: str, name: Optional[str] = None) -> Tuple[Room, Player]:
        """
        Create a room in the lobby phase with the requesting connection as first member.

        Raises:
            ValidationError: ALREADY_IN_ROOM if the connection already has a room
        """
        if self.player_registry.exists(player_id):
            raise ValidationError(ErrorCode.ALREADY_IN_ROOM, 'You are already in a room. Leave it first.')

        room = self.room_registry.create(self.game_settings.mission_duration, self.game_settings.total_distance)

        with self.concurrency_control.room_operation(room.id):
            try:
                player = self.player_registry.create(
                    player_id, name, room.id, self.game_settings.secret_action_uses
                )
            except ValidationError:
                self.room_registry.remove(room.id)
                self.concurrency_control.cleanup_room_lock(room.id)
                raise
            room.add_member(player_id)
            self.broadcast_service.add_to_room(player_id, room.id)

            logger.info(f'Player {player.display_name} ({player_id}) created room {room.id}')

            members = self._room_members(room)
            self.broadcast_service.emit_to_player(
                'roomCreated', self.presenter.create_membership_response(room, player, members), player_id
            )
            self._broadcast_room_update(room)
            self.broadcast_service.emit_to_player(
                'chatMessage',
                self.presenter.create_system_message(f'Room {room.id} created! Share this code with your friends.'),
                player_id
            )
        return room, player

    def join_room(self, player_id: str, room_id: str, name: Optional[str] = None) -> Tuple[Room, Player]:
        """
        Add a connection to an existing lobby.

        Raises:
            ValidationError: ROOM_NOT_FOUND, GAME_ALREADY_STARTED, ROOM_FULL or ALREADY_IN_ROOM
        """
        if self.player_registry.exists(player_id):
            raise ValidationError(ErrorCode.ALREADY_IN_ROOM, 'You are already in a room. Leave it first.')

        self.room_registry.get(room_id)

        with self.concurrency_control.room_operation(room_id):
            room = self.room_registry.get(room_id)

            if room.started:
                raise ValidationError(ErrorCode.GAME_ALREADY_STARTED, 'The game has already started')

            max_players = self.game_settings.max_players_per_room
            if len(room.member_ids) >= max_players:
                raise ValidationError(
                    ErrorCode.ROOM_FULL,
                    f'Room is full (max {max_players} players)',
                    {'max_players': max_players}
                )

            player = self.player_registry.create(player_id, name, room.id, self.game_settings.secret_action_uses)
            room.add_member(player_id)
            self.broadcast_service.add_to_room(player_id, room.id)

            logger.info(f'Player {player.display_name} ({player_id}) joined room {room.id}')

            members = self._room_members(room)
            self.broadcast_service.emit_to_player(
                'joinedRoom', self.presenter.create_membership_response(room, player, members), player_id
            )
            self._broadcast_room_update(room)
            self._system_message(room.id, f'{player.display_name} joined the game!')
        return room, player

    def leave_room(self, player_id: str) -> str:
        """
        Leave the current room voluntarily.

        Returns:
            The id of the room that was left

        Raises:
            ValidationError: NOT_IN_ROOM if the connection has no room
        """
        player = self.player_registry.get(player_id)
        room_id = player.room_id
        if room_id is None:
            self.player_registry.remove(player_id)
            raise ValidationError(ErrorCode.NOT_IN_ROOM, 'You are not currently in a room')

        with self.concurrency_control.room_operation(room_id):
            room = self.room_registry.find(room_id)
            self.broadcast_service.remove_from_room(player_id, room_id)
            self.broadcast_service.emit_to_player('leftRoom', {'roomId': room_id}, player_id)
            if room is not None and room.has_member(player_id):
                self._detach_member(room, player)
            self.player_registry.remove(player_id)

        logger.info(f'Player {player.display_name} ({player_id}) left room {room_id}')
        return room_id

    def handle_disconnect(self, player_id: str) -> bool:
        """
        Clean up after a closed connection. Repeated calls are no-ops.

        Returns:
            True if a Player record was removed
        """
        player = self.player_registry.find(player_id)
        if player is None:
            return False

        room_id = player.room_id
        if room_id is not None:
            with self.concurrency_control.room_operation(room_id):
                room = self.room_registry.find(room_id)
                if room is not None and room.has_member(player_id):
                    self._detach_member(room, player)
                self.player_registry.remove(player_id)
        else:
            self.player_registry.remove(player_id)

        logger.info(f'Player {player.display_name} ({player_id}) disconnected')
        return True

    def _detach_member(self, room: Room, player: Player, announce: bool = True) -> None:
        """Remove a member and apply the membership rules. Caller holds the room lock."""
        room.remove_member(player.id)
        self.vote_tally.discard_member(room, player.id)
        player.room_id = None

        if not room.member_ids:
            self._destroy_room(room)
            return

        self._broadcast_room_update(room)
        if announce:
            self._system_message(room.id, f'{player.display_name} left the game')
        self._apply_membership_rules(room)

    def _apply_membership_rules(self, room: Room) -> None:
        if not room.member_ids:
            self._destroy_room(room)
            return

        if room.started and len(room.member_ids) < self.game_settings.min_players_required:
            self._end_game_locked(room, EndReason.TOO_FEW_PLAYERS)
        elif room.started and room.votes and self.vote_tally.is_round_complete(room):
            self._resolve_votes(room)

    def _destroy_room(self, room: Room) -> None:
        self.tick_simulator.cancel(room)
        if room.reset_task is not None:
            room.reset_task.cancel()
            room.reset_task = None
        room.phase = RoomPhase.LOBBY
        self.room_registry.remove(room.id)
        self.concurrency_control.cleanup_room_lock(room.id)
        logger.info(f'Room {room.id} destroyed (no members left)')

    # Game flow

    def start_game(self, player_id: str) -> Room:
        """
        Move the requesting player's room from lobby to active.

        Raises:
            ValidationError: GAME_ALREADY_STARTED, GAME_ENDING or INSUFFICIENT_PLAYERS
        """
        player = self.player_registry.get(player_id)

        with self.concurrency_control.room_operation(self._room_id_of(player)):
            room = self._require_room_of(player)

            if room.started:
                raise ValidationError(ErrorCode.GAME_ALREADY_STARTED, 'The game has already started')
            if room.phase is RoomPhase.ENDING:
                raise ValidationError(ErrorCode.GAME_ENDING, 'The previous game is still wrapping up')

            min_players = self.game_settings.min_players_required
            if len(room.member_ids) < min_players:
                raise ValidationError(
                    ErrorCode.INSUFFICIENT_PLAYERS,
                    f'At least {min_players} players are needed to start the game',
                    {'min_players': min_players}
                )

            room.reset_ship(self.game_settings.mission_duration, self.game_settings.total_distance)
            members = self._room_members(room)
            roles = assign_roles(len(members), self.rng)
            for member, role in zip(members, roles):
                member.reset_for_new_game(self.game_settings.secret_action_uses)
                member.assign_role(role, self.content_manager.get_objective(role))

            room.game_id += 1
            room.phase = RoomPhase.ACTIVE

            for member in members:
                self.broadcast_service.emit_to_player(
                    'roleAssigned', self.presenter.create_role_assignment(member), member.id
                )

            self.tick_simulator.start(room, partial(self.run_tick, room.id, room.game_id))

            logger.info(f'Game {room.game_id} started in room {room.id} with {len(members)} players')

            self.broadcast_service.emit_to_room('gameStarted', self.presenter.create_room_summary(room, members), room.id)
            self._system_message(room.id, 'GAME STARTED! Secret roles have been handed out. Check your objective!')
        return room

    def run_tick(self, room_id: str, game_id: int):
        """
        Tick callback for one room.

        Does nothing when the room is gone, no longer active, or running a
        different game than the one this tick was scheduled for.

        Returns:
            The TickResult, or None when the tick was skipped
        """
        with self.concurrency_control.room_operation(room_id):
            room = self.room_registry.find(room_id)
            if room is None or not room.started or room.game_id != game_id:
                logger.debug(f'Skipping stale tick for room {room_id}')
                return None

            result = self.tick_simulator.advance(room)

            if result.random_event is not None:
                self.broadcast_service.emit_to_room(
                    'randomEvent', self.presenter.create_random_event(result.random_event), room.id
                )

            self.broadcast_service.emit_to_room('gameUpdate', self.presenter.create_game_update(room), room.id)

            if result.is_terminal:
                self._end_game_locked(room, result.end_reason)
            return result

    def end_game(self, room_id: str, reason: EndReason) -> bool:
        """End the active game in a room. Returns False if nothing was running."""
        with self.concurrency_control.room_operation(room_id):
            room = self.room_registry.find(room_id)
            if room is None or not room.started:
                return False
            self._end_game_locked(room, reason)
            return True

    def _end_game_locked(self, room: Room, reason: EndReason) -> None:
        self.tick_simulator.cancel(room)
        room.phase = RoomPhase.ENDING

        winners = []
        for member in self._room_members(room):
            member.objective_completed = evaluate_objective(member, room, self.rng)
            if member.objective_completed:
                winners.append(member)

        logger.info(f'Game {room.game_id} in room {room.id} ended ({reason.value}); winners: {[w.id for w in winners]}')

        self.broadcast_service.emit_to_room('gameEnded', self.presenter.create_game_ended(room, reason, winners), room.id)
        winner_names = ', '.join(w.display_name for w in winners) or 'Nobody'
        self._system_message(room.id, f'GAME OVER! {reason.message} Winners: {winner_names}')

        room.reset_task = self.scheduler.call_later(
            self.game_settings.reset_delay,
            partial(self.reset_room, room.id, room.game_id),
            name=f'reset-{room.id}'
        )

    def reset_room(self, room_id: str, game_id: int) -> bool:
        """
        Return an ending room to the lobby with every game field restored.

        Returns:
            True if the room was reset
        """
        with self.concurrency_control.room_operation(room_id):
            room = self.room_registry.find(room_id)
            if room is None or room.phase is not RoomPhase.ENDING or room.game_id != game_id:
                return False

            for member in self._room_members(room):
                member.reset_for_new_game(self.game_settings.secret_action_uses)
            room.reset_ship(self.game_settings.mission_duration, self.game_settings.total_distance)

            logger.info(f'Room {room.id} reset to lobby')
            self._broadcast_room_update(room)
            self._system_message(room.id, 'The ship is ready for a new mission.')
            return True

    # Player actions

    def use_secret_action(self, player_id: str, action_name, target=None) -> SecretAction:
        """
        Spend one secret action use and apply its effect.

        Raises:
            ValidationError: GAME_NOT_STARTED or NO_SECRET_USES
        """
        player = self.player_registry.get(player_id)

        with self.concurrency_control.room_operation(self._room_id_of(player)):
            room = self._require_room_of(player)
            self._require_active(room)

            if player.secret_action_uses <= 0:
                raise ValidationError(ErrorCode.NO_SECRET_USES, 'Your secret button has no uses left!')

            action = SecretAction.parse(action_name)
            player.secret_action_uses -= 1
            if player.role is Role.SPY:
                player.secret_data_collected += 1

            effect = action.effect
            if effect.system is not None:
                room.damage_system(effect.system, -effect.health_change)

            message = self.content_manager.get_secret_action_message(action)
            room.append_event(
                Event(kind=EventKind.SECRET_ACTION, message=message, actor=player.display_name),
                self.game_settings.max_event_log
            )

            logger.info(f'Player {player_id} used secret action {action.value} in room {room.id} (target={target})')

            self.broadcast_service.emit_to_room(
                'secretButtonUsed', self.presenter.create_secret_button_used(player, action, message), room.id
            )
            self._system_message(room.id, f'{player.display_name} pressed the secret button! {message}')
        return action

    def repair_system(self, player_id: str, system_name) -> int:
        """
        Repair a ship system: +35 for the Technician, +15 for everyone else.

        Returns:
            The system's new health

        Raises:
            ValidationError: GAME_NOT_STARTED or INVALID_SYSTEM
        """
        player = self.player_registry.get(player_id)

        with self.concurrency_control.room_operation(self._room_id_of(player)):
            room = self._require_room_of(player)
            self._require_active(room)

            system = system_name if isinstance(system_name, ShipSystem) else ShipSystem.from_name(system_name)
            if system is None:
                raise ValidationError(
                    ErrorCode.INVALID_SYSTEM,
                    'Invalid system',
                    {'system': system_name, 'valid_systems': [s.value for s in ShipSystem]}
                )

            is_technician = player.role is Role.TECHNICIAN
            amount = TECHNICIAN_REPAIR_AMOUNT if is_technician else DEFAULT_REPAIR_AMOUNT
            new_health = room.repair_system(system, amount)

            logger.debug(f'Player {player_id} repaired {system.value} to {new_health} in room {room.id}')

            self.broadcast_service.emit_to_room(
                'systemRepaired',
                self.presenter.create_system_repaired(system, new_health, player, is_technician),
                room.id
            )
            self._system_message(room.id, f'{player.display_name} repaired {system.value} to {new_health}%')
        return new_health

    def cast_vote(self, player_id: str, target_id: str):
        """
        Vote to eject `target_id`; resolves the round once every member has voted.

        Returns:
            The VoteReceipt for the accepted vote
        """
        player = self.player_registry.get(player_id)

        with self.concurrency_control.room_operation(self._room_id_of(player)):
            room = self._require_room_of(player)
            receipt = self.vote_tally.cast_vote(room, player, target_id)
            target = self.player_registry.get(target_id)

            self.broadcast_service.emit_to_room(
                'voteCasted',
                self.presenter.create_vote_casted(player, target, receipt.votes_cast, receipt.total_players),
                room.id
            )

            if receipt.round_complete:
                self._resolve_votes(room)
        return receipt

    def _resolve_votes(self, room: Room) -> None:
        outcome = self.vote_tally.resolve(room)
        if outcome.ejected:
            self._eject(room, outcome.target_id, outcome.votes)

    def _eject(self, room: Room, target_id: str, votes: int) -> None:
        target = self.player_registry.find(target_id)
        if target is None:
            return

        room.remove_member(target_id)
        self.vote_tally.discard_member(room, target_id)
        target.room_id = None

        logger.info(f'Player {target.display_name} ({target_id}) ejected from room {room.id} with {votes} votes')

        self.broadcast_service.emit_to_room('playerEjected', self.presenter.create_player_ejected(target, votes), room.id)
        self._system_message(room.id, f'{target.display_name} was ejected from the ship!')

        # Connection goes first so the Player record never outlives it
        self.broadcast_service.emit_to_player('ejected', {'reason': 'Ejected by vote'}, target_id)
        self.broadcast_service.disconnect_player(target_id)
        self.player_registry.remove(target_id)

        if room.member_ids:
            self._broadcast_room_update(room)
        self._apply_membership_rules(room)

    def send_chat(self, player_id: str, message: str) -> None:
        """Relay a chat line to the sender's room."""
        player = self.player_registry.get(player_id)

        with self.concurrency_control.room_operation(self._room_id_of(player)):
            room = self._require_room_of(player)
            self.broadcast_service.emit_to_room(
                'chatMessage', self.presenter.create_chat_message(player.display_name, message), room.id
            )

    # Introspection

    def active_room_count(self) -> int:
        rooms = [self.room_registry.find(room_id) for room_id in self.room_registry.all_ids()]
        return sum(1 for room in rooms if room is not None and room.started)
