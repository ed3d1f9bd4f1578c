"""
Win evaluation for each role, run once when a game ends.
"""

import random
from typing import Optional

from src.core.models import Player, Room
from src.core.ship import Role, ShipSystem

CAPTAIN_MIN_HEALTH = 60
TECHNICIAN_MIN_SYSTEM_HEALTH = 70
AI_MAX_OXYGEN = 50
SPY_DATA_TARGET = 3


def evaluate_objective(player: Player, room: Room, rng: Optional[random.Random] = None) -> bool:
    """
    Decide whether a player's hidden objective is met in the final room state.

    Args:
        player: Player whose role is evaluated
        room: Room snapshot at game end
        rng: Random source, only consulted for players without a role

    Returns:
        True if the player won
    """
    role = player.role

    if role is Role.CAPTAIN:
        return room.distance_traveled >= room.total_distance and room.overall_health >= CAPTAIN_MIN_HEALTH
    if role is Role.TECHNICIAN:
        return all(health >= TECHNICIAN_MIN_SYSTEM_HEALTH for health in room.system_health.values())
    if role is Role.SABOTEUR:
        return room.distance_traveled < room.total_distance or room.overall_health <= 0
    if role is Role.SPY:
        return player.secret_data_collected >= SPY_DATA_TARGET
    if role is Role.AI:
        return room.system_health[ShipSystem.OXYGEN] < AI_MAX_OXYGEN

    # No tracked objective: coin flip
    rng = rng or random.Random()
    return rng.random() < 0.5
