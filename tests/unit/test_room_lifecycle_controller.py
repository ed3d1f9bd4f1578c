"""
Room Lifecycle Controller Unit Tests

Drives the controller over real registries with a manual scheduler and a
mocked Socket.IO transport. Roles come out in assignment order because the
quiet random source does not shuffle: Captain, Technician, Spy, AI, Saboteur.
"""

import pytest

from src.core.errors import ErrorCode, ErrorKind, ValidationError
from src.core.ship import EndReason, Role, RoomPhase, ShipSystem
from tests.helpers.room_helpers import (
    build_controller, create_room_with_players, make_game_settings, tick_task
)
from tests.helpers.socket_mocks import MockSocketIOTestHelper


class ControllerTestCase:
    """Shared setup for controller tests"""

    settings_overrides = {}

    def setup_method(self):
        self.controller, self.scheduler, self.socketio = build_controller(
            game_settings=make_game_settings(**self.settings_overrides)
        )
        self.emissions = MockSocketIOTestHelper(self.socketio)

    def assert_error(self, code, func, *args):
        with pytest.raises(ValidationError) as exc_info:
            func(*args)
        assert exc_info.value.code == code
        return exc_info.value

    def started_room(self, count=3):
        room, player_ids = create_room_with_players(self.controller, count)
        self.controller.start_game(player_ids[0])
        return room, player_ids


class TestRoomMembership(ControllerTestCase):
    """Test create, join, leave and disconnect"""

    def test_create_room(self):
        room, player = self.controller.create_room('sid-0', 'Nova')

        assert room.phase is RoomPhase.LOBBY
        assert room.member_ids == ['sid-0']
        assert player.room_id == room.id
        self.socketio.server.enter_room.assert_called_once_with('sid-0', room.id, namespace='/')

        created = self.emissions.last('roomCreated', room='sid-0')
        assert created['roomId'] == room.id
        assert created['playerId'] == 'sid-0'
        assert created['player'] == 'Nova'
        assert created['room']['players'] == [{'id': 'sid-0', 'name': 'Nova', 'hasVoted': False}]

    def test_create_room_default_name(self):
        _, player = self.controller.create_room('abcdefgh', None)
        assert player.display_name == 'Player_abcd'

    def test_create_room_twice_rejected(self):
        self.controller.create_room('sid-0', 'Nova')

        self.assert_error(ErrorCode.ALREADY_IN_ROOM, self.controller.create_room, 'sid-0', 'Nova')
        assert self.controller.room_registry.count() == 1

    def test_join_room(self):
        room, _ = self.controller.create_room('sid-0', 'Nova')
        self.emissions.reset()

        self.controller.join_room('sid-1', room.id, 'Orion')

        assert room.member_ids == ['sid-0', 'sid-1']
        joined = self.emissions.last('joinedRoom', room='sid-1')
        assert joined['roomId'] == room.id
        update = self.emissions.last('roomUpdated', room=room.id)
        assert [p['name'] for p in update['players']] == ['Nova', 'Orion']
        chat = self.emissions.last('chatMessage', room=room.id)
        assert chat['message'] == 'Orion joined the game!'

    def test_join_missing_room(self):
        error = self.assert_error(ErrorCode.ROOM_NOT_FOUND, self.controller.join_room, 'sid-1', 'ZZZZZ', None)
        assert error.kind is ErrorKind.NOT_FOUND
        assert not self.controller.player_registry.exists('sid-1')

    def test_join_full_room(self):
        room, _ = create_room_with_players(self.controller, 10)

        error = self.assert_error(ErrorCode.ROOM_FULL, self.controller.join_room, 'late', room.id, None)

        assert error.kind is ErrorKind.CAPACITY
        assert len(room.member_ids) == 10
        assert not self.controller.player_registry.exists('late')

    def test_join_active_room_rejected(self):
        room, _ = self.started_room(2)

        error = self.assert_error(ErrorCode.GAME_ALREADY_STARTED, self.controller.join_room, 'late', room.id, None)
        assert error.kind is ErrorKind.INVALID_STATE

    def test_join_during_ending_allowed(self):
        room, _ = self.started_room(2)
        self.controller.end_game(room.id, EndReason.TIME_OUT)

        self.controller.join_room('late', room.id, None)

        assert 'late' in room.member_ids

    def test_leave_room(self):
        room, player_ids = create_room_with_players(self.controller, 2)

        assert self.controller.leave_room('sid-1') == room.id

        assert room.member_ids == ['sid-0']
        assert not self.controller.player_registry.exists('sid-1')
        assert self.emissions.last('leftRoom', room='sid-1') == {'roomId': room.id}
        self.socketio.server.leave_room.assert_called_once_with('sid-1', room.id, namespace='/')

    def test_leave_without_room(self):
        self.assert_error(ErrorCode.NOT_IN_ROOM, self.controller.leave_room, 'nobody')

    def test_last_member_leaving_destroys_room(self):
        room, _ = self.controller.create_room('sid-0', 'Nova')

        self.controller.leave_room('sid-0')

        assert not self.controller.room_registry.exists(room.id)
        assert self.controller.concurrency_control.lock_count() == 0

    def test_disconnect_is_idempotent(self):
        room, _ = create_room_with_players(self.controller, 2)

        assert self.controller.handle_disconnect('sid-1') is True
        assert self.controller.handle_disconnect('sid-1') is False
        assert room.member_ids == ['sid-0']

    def test_disconnect_of_unknown_connection(self):
        assert self.controller.handle_disconnect('ghost') is False


class TestGameStart(ControllerTestCase):
    """Test start_game"""

    def test_start_requires_two_players(self):
        self.controller.create_room('sid-0', 'Nova')

        error = self.assert_error(ErrorCode.INSUFFICIENT_PLAYERS, self.controller.start_game, 'sid-0')
        assert error.details == {'min_players': 2}

    def test_start_assigns_roles_individually(self):
        room, player_ids = self.started_room(3)

        assert room.started
        assert room.game_id == 1
        roles = [self.controller.get_player(pid).role for pid in player_ids]
        assert roles == [Role.CAPTAIN, Role.TECHNICIAN, Role.SPY]

        for pid, role in zip(player_ids, roles):
            payloads = self.emissions.emitted('roleAssigned', room=pid)
            assert len(payloads) == 1
            assert payloads[0]['role'] == role.value
            assert payloads[0]['objective']
        assert self.emissions.emitted('roleAssigned', room=room.id) == []

    def test_start_broadcasts_without_roles(self):
        room, _ = self.started_room(3)

        started = self.emissions.last('gameStarted', room=room.id)

        assert started['gameStarted'] is True
        assert started['timeLeft'] == 900
        assert 'Captain' not in str(started)

    def test_start_creates_one_tick_task(self):
        room, _ = self.started_room(2)

        task = tick_task(self.scheduler, room)
        assert room.tick_task is task

    def test_start_twice_rejected(self):
        room, player_ids = self.started_room(2)

        self.assert_error(ErrorCode.GAME_ALREADY_STARTED, self.controller.start_game, player_ids[1])
        assert len(self.scheduler.tasks_named(f'tick-{room.id}')) == 1

    def test_start_during_ending_rejected(self):
        room, player_ids = self.started_room(2)
        self.controller.end_game(room.id, EndReason.TIME_OUT)

        self.assert_error(ErrorCode.GAME_ENDING, self.controller.start_game, player_ids[0])

    def test_start_when_not_in_room(self):
        self.assert_error(ErrorCode.NOT_IN_ROOM, self.controller.start_game, 'nobody')


class TestTicksAndEnding(ControllerTestCase):
    """Test tick callbacks, game end and reset"""

    settings_overrides = {'mission_duration_seconds': 3}

    def test_tick_broadcasts_game_update(self):
        room, _ = self.started_room(2)

        result = tick_task(self.scheduler, room).fire()

        assert not result.is_terminal
        update = self.emissions.last('gameUpdate', room=room.id)
        assert update['timeLeft'] == 2
        assert update['distance'] == pytest.approx(0.5)

    def test_time_out_ends_game_and_schedules_reset(self):
        room, _ = self.started_room(2)
        task = tick_task(self.scheduler, room)

        for _ in range(3):
            task.fire()

        assert task.cancelled
        assert room.phase is RoomPhase.ENDING
        ended = self.emissions.last('gameEnded', room=room.id)
        assert ended['reason'] == 'time_out'
        assert ended['message'] == EndReason.TIME_OUT.message
        assert room.reset_task is self.scheduler.tasks_named(f'reset-{room.id}')[0]
        assert room.reset_task.interval == 30

    def test_reset_returns_room_to_lobby(self):
        room, player_ids = self.started_room(2)
        self.controller.use_secret_action(player_ids[0], 'engine', None)
        self.controller.end_game(room.id, EndReason.TIME_OUT)

        assert room.reset_task.fire() is True

        assert room.phase is RoomPhase.LOBBY
        assert room.system_health[ShipSystem.ENGINE] == 100
        assert room.time_remaining == 3
        assert room.event_log == []
        for pid in player_ids:
            player = self.controller.get_player(pid)
            assert player.role is None
            assert player.secret_action_uses == 3
            assert player.objective_completed is False
        assert self.emissions.last('roomUpdated', room=room.id)['phase'] == 'lobby'

    def test_stale_reset_is_ignored(self):
        room, player_ids = self.started_room(2)
        self.controller.end_game(room.id, EndReason.TIME_OUT)
        stale_game = room.game_id

        assert self.controller.reset_room(room.id, stale_game + 1) is False
        assert room.phase is RoomPhase.ENDING

    def test_stale_tick_is_ignored(self):
        room, _ = self.started_room(2)

        assert self.controller.run_tick(room.id, room.game_id + 1) is None
        assert room.time_remaining == 3

    def test_end_game_when_not_running(self):
        room, _ = create_room_with_players(self.controller, 2)
        assert self.controller.end_game(room.id, EndReason.TIME_OUT) is False

    def test_winners_evaluated_at_end(self):
        room, player_ids = self.started_room(2)
        room.distance_traveled = room.total_distance

        self.controller.end_game(room.id, EndReason.ARRIVED)

        captain = self.controller.get_player(player_ids[0])
        technician = self.controller.get_player(player_ids[1])
        assert captain.objective_completed
        assert technician.objective_completed
        assert self.emissions.last('gameEnded', room=room.id)['winners'] == ['Host', 'Player1']

    def test_leaving_below_minimum_ends_game(self):
        room, player_ids = self.started_room(2)
        task = tick_task(self.scheduler, room)

        self.controller.handle_disconnect(player_ids[1])

        assert task.cancelled
        assert room.phase is RoomPhase.ENDING
        assert self.emissions.last('gameEnded', room=room.id)['reason'] == 'too_few_players'

    def test_everyone_leaving_cancels_tick(self):
        room, player_ids = self.started_room(2)
        task = tick_task(self.scheduler, room)

        for pid in player_ids:
            self.controller.handle_disconnect(pid)

        assert task.cancelled
        assert not self.controller.room_registry.exists(room.id)
        self.emissions.reset()
        assert self.controller.run_tick(room.id, room.game_id) is None
        self.emissions.assert_not_emitted('gameUpdate')


class TestPlayerActions(ControllerTestCase):
    """Test secret actions, repairs and chat"""

    def test_secret_action_requires_active_game(self):
        create_room_with_players(self.controller, 2)
        self.assert_error(ErrorCode.GAME_NOT_STARTED, self.controller.use_secret_action, 'sid-0', 'engine', None)

    def test_secret_action_applies_effect(self):
        room, player_ids = self.started_room(2)

        self.controller.use_secret_action(player_ids[1], 'engine', 'anything')

        assert room.system_health[ShipSystem.ENGINE] == 80
        assert self.controller.get_player(player_ids[1]).secret_action_uses == 2
        used = self.emissions.last('secretButtonUsed', room=room.id)
        assert used['action'] == 'engine'
        assert used['remainingUses'] == 2
        assert room.event_log[-1].actor == 'Player1'

    def test_unknown_action_falls_back_to_lights(self):
        room, player_ids = self.started_room(2)

        self.controller.use_secret_action(player_ids[0], 'warp', None)

        assert all(health == 100 for health in room.system_health.values())
        assert self.emissions.last('secretButtonUsed', room=room.id)['action'] == 'lights'

    def test_secret_uses_run_out(self):
        room, player_ids = self.started_room(2)
        for _ in range(3):
            self.controller.use_secret_action(player_ids[0], 'hack', None)

        error = self.assert_error(ErrorCode.NO_SECRET_USES, self.controller.use_secret_action,
                                  player_ids[0], 'hack', None)

        assert error.kind is ErrorKind.INVALID_STATE
        assert room.system_health[ShipSystem.NAVIGATION] == 25

    def test_spy_collects_data(self):
        room, player_ids = self.started_room(3)
        spy = self.controller.get_player(player_ids[2])
        assert spy.role is Role.SPY

        for _ in range(3):
            self.controller.use_secret_action(spy.id, 'lights', None)

        assert spy.secret_data_collected == 3

    def test_repair_amounts(self):
        room, player_ids = self.started_room(2)
        room.system_health[ShipSystem.SHIELD] = 10

        assert self.controller.repair_system(player_ids[0], 'Shield') == 25
        assert self.controller.repair_system(player_ids[1], 'Shield') == 60
        assert self.controller.repair_system(player_ids[1], 'Shield') == 95
        assert self.controller.repair_system(player_ids[1], 'Shield') == 100

        repaired = self.emissions.last('systemRepaired', room=room.id)
        assert repaired == {'system': 'Shield', 'newHealth': 100, 'repairedBy': 'Player1', 'isTechnician': True}

    def test_repair_invalid_system(self):
        self.started_room(2)

        error = self.assert_error(ErrorCode.INVALID_SYSTEM, self.controller.repair_system, 'sid-0', 'Warp')
        assert error.kind is ErrorKind.INVALID_INPUT

    def test_repair_requires_active_game(self):
        create_room_with_players(self.controller, 2)
        self.assert_error(ErrorCode.GAME_NOT_STARTED, self.controller.repair_system, 'sid-0', 'Engine')

    def test_chat_relays_without_role(self):
        room, _ = self.started_room(2)

        self.controller.send_chat('sid-1', 'I saw something')

        chat = self.emissions.last('chatMessage', room=room.id)
        assert chat['sender'] == 'Player1'
        assert chat['message'] == 'I saw something'
        assert 'role' not in chat

    def test_chat_requires_room(self):
        self.assert_error(ErrorCode.NOT_IN_ROOM, self.controller.send_chat, 'nobody', 'hi')


class TestVoting(ControllerTestCase):
    """Test votes and ejection"""

    def test_vote_broadcast(self):
        room, player_ids = self.started_room(3)

        receipt = self.controller.cast_vote(player_ids[0], player_ids[2])

        assert receipt.votes_cast == 1
        voted = self.emissions.last('voteCasted', room=room.id)
        assert voted == {'voter': 'Host', 'target': 'Player2', 'votes': 1, 'totalPlayers': 3}

    def test_majority_ejects_target(self):
        room, player_ids = self.started_room(3)
        host, second, third = player_ids

        self.controller.cast_vote(host, third)
        self.controller.cast_vote(second, third)
        self.controller.cast_vote(third, host)

        assert room.member_ids == [host, second]
        assert not self.controller.player_registry.exists(third)
        assert self.emissions.last('ejected', room=third) == {'reason': 'Ejected by vote'}
        self.socketio.server.disconnect.assert_called_once_with(third, namespace='/')
        assert self.emissions.last('playerEjected', room=room.id)['votes'] == 2
        assert room.votes == {}
        assert room.started

    def test_split_vote_ejects_nobody(self):
        room, player_ids = self.started_room(2)

        self.controller.cast_vote(player_ids[0], player_ids[1])
        self.controller.cast_vote(player_ids[1], player_ids[0])

        assert room.member_ids == player_ids
        assert room.votes == {}
        self.emissions.assert_not_emitted('playerEjected')

    def test_vote_for_unknown_target(self):
        room, player_ids = self.started_room(2)

        self.assert_error(ErrorCode.INVALID_TARGET, self.controller.cast_vote, player_ids[0], 'ghost')

        assert room.votes == {}

    def test_departure_completes_round(self):
        room, player_ids = self.started_room(4)
        a, b, c, d = player_ids
        self.controller.cast_vote(a, c)
        self.controller.cast_vote(b, c)
        self.controller.cast_vote(c, a)

        self.controller.handle_disconnect(d)

        assert room.member_ids == [a, b]
        assert self.emissions.last('playerEjected', room=room.id)['playerId'] == c
