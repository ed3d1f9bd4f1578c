"""
Services package for Starship Saboteur

Contains the registries, simulation and lifecycle services that make up the
room engine, each with a single responsibility.
"""

from .player_registry import PlayerRegistry
from .room_registry import RoomRegistry
from .concurrency_control_service import ConcurrencyControlService
from .task_scheduler import TaskScheduler
from .vote_tally import VoteTally
from .tick_simulator import TickSimulator
from .room_lifecycle_controller import RoomLifecycleController

__all__ = [
    'PlayerRegistry',
    'RoomRegistry',
    'ConcurrencyControlService',
    'TaskScheduler',
    'VoteTally',
    'TickSimulator',
    'RoomLifecycleController'
]
