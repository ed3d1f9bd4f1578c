"""
Role assignment for a starting game.
"""

import random
from typing import List, Optional

from src.core.ship import Role


MANDATORY_ROLES = (Role.CAPTAIN, Role.TECHNICIAN)

# Roles added once the crew reaches the given size
SIZED_ROLES = (
    (3, Role.SPY),
    (4, Role.AI),
    (5, Role.SABOTEUR),
)


def assign_roles(player_count: int, rng: Optional[random.Random] = None) -> List[Role]:
    """
    Build a shuffled role list with one role per member index.

    Captain and Technician are always present; Spy, AI and Saboteur join at 3, 4
    and 5 players. Remaining slots are filled by random draws that skip roles
    already handed out until every role is in play; past that point draws may
    repeat.

    Args:
        player_count: Number of members, at least 2
        rng: Random source (defaults to the module random generator)

    Returns:
        List of `player_count` roles in random order

    Raises:
        ValueError: If fewer than 2 players are given
    """
    if player_count < 2:
        raise ValueError(f"At least 2 players are required, got {player_count}")

    rng = rng or random.Random()
    all_roles = list(Role)

    assigned = list(MANDATORY_ROLES)
    for threshold, role in SIZED_ROLES:
        if player_count >= threshold:
            assigned.append(role)

    while len(assigned) < player_count:
        draw = rng.choice(all_roles)
        if draw not in assigned or len(set(assigned)) == len(all_roles):
            assigned.append(draw)

    rng.shuffle(assigned)
    return assigned
