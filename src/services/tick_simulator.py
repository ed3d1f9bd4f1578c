"""
Tick Simulator - Advances the ship simulation of active rooms.

This service handles:
- Owning the periodic tick task of every active room
- Advancing one simulation step: clock, distance, wear, random events, health
- Detecting terminal conditions
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from src.config.game_settings import get_game_settings
from src.core.models import Event, Room
from src.core.ship import EndReason, RANDOM_EVENT_KINDS, EventKind, ShipSystem

logger = logging.getLogger(__name__)

DISTANCE_PER_TICK = 0.5
SYSTEM_WEAR_CHANCE = 0.02
SYSTEM_WEAR_AMOUNT = 2
RANDOM_EVENT_CHANCE = 0.05
METEOR_DAMAGE = 25


@dataclass
class TickResult:
    """What happened during one simulation step."""
    random_event: Optional[Event] = None
    end_reason: Optional[EndReason] = None

    @property
    def is_terminal(self) -> bool:
        return self.end_reason is not None


class TickSimulator:
    """Owns per-room tick tasks and the simulation step."""

    def __init__(self, scheduler, content_manager, rng: Optional[random.Random] = None, game_settings=None):
        """Initialize the tick simulator.

        Args:
            scheduler: TaskScheduler used to run periodic ticks
            content_manager: Source of random event messages
            rng: Random source for wear and events
            game_settings: Settings override (defaults to the global settings)
        """
        self.scheduler = scheduler
        self.content_manager = content_manager
        self.rng = rng or random.Random()
        self.game_settings = game_settings or get_game_settings()

    # Task ownership

    def start(self, room: Room, on_tick: Callable[[], None]) -> None:
        """Start the periodic tick for a room, replacing any previous task."""
        self.cancel(room)
        room.tick_task = self.scheduler.call_every(
            self.game_settings.tick_interval, on_tick, name=f'tick-{room.id}'
        )
        logger.info(f"Started tick task for room {room.id}")

    def cancel(self, room: Room) -> bool:
        """Cancel the room's tick task if one is running."""
        task = room.tick_task
        if task is None:
            return False
        task.cancel()
        room.tick_task = None
        logger.info(f"Cancelled tick task for room {room.id}")
        return True

    # Simulation

    def advance(self, room: Room) -> TickResult:
        """
        Run one simulation step on an active room.

        Args:
            room: Room to advance; the caller holds its lock

        Returns:
            TickResult with the random event (if any) and the end reason (if terminal)
        """
        result = TickResult()

        room.time_remaining -= 1

        engine_efficiency = room.system_health[ShipSystem.ENGINE] / 100
        room.distance_traveled += DISTANCE_PER_TICK * engine_efficiency

        for system in ShipSystem:
            if self.rng.random() < SYSTEM_WEAR_CHANCE:
                room.damage_system(system, SYSTEM_WEAR_AMOUNT)

        if self.rng.random() < RANDOM_EVENT_CHANCE and len(room.event_log) < self.game_settings.max_event_log:
            result.random_event = self._trigger_random_event(room)

        room.recompute_overall_health()
        result.end_reason = self.check_terminal(room)
        return result

    def _trigger_random_event(self, room: Room) -> Event:
        kind = self.rng.choice(RANDOM_EVENT_KINDS)
        event = Event(kind=kind, message=self.content_manager.get_event_message(kind))
        room.append_event(event, self.game_settings.max_event_log)

        if kind is EventKind.METEOR:
            system = self.rng.choice(list(ShipSystem))
            room.damage_system(system, METEOR_DAMAGE)
            logger.debug(f"Meteor hit {system.value} in room {room.id}")

        logger.info(f"Random event {kind.value} in room {room.id}")
        return event

    @staticmethod
    def check_terminal(room: Room) -> Optional[EndReason]:
        """Terminal conditions in priority order: time, arrival, destruction."""
        if room.time_remaining <= 0:
            return EndReason.TIME_OUT
        if room.distance_traveled >= room.total_distance:
            return EndReason.ARRIVED
        if room.overall_health <= 0:
            return EndReason.DESTROYED
        return None
