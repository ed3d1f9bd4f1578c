"""
Vote Tally - Ejection voting for Starship Saboteur.

This service handles:
- Recording one vote per player per voting round
- Detecting when every member has voted
- Resolving the round into an optional ejection
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Optional

from src.core.errors import ErrorCode, ValidationError
from src.core.models import Player, Room

logger = logging.getLogger(__name__)


@dataclass
class VoteReceipt:
    """Result of a single accepted vote."""
    voter_id: str
    target_id: str
    votes_cast: int
    total_players: int

    @property
    def round_complete(self) -> bool:
        return self.votes_cast >= self.total_players


@dataclass
class VoteOutcome:
    """Result of resolving a voting round."""
    target_id: Optional[str]
    votes: int
    tally: Dict[str, int] = field(default_factory=dict)
    ejected: bool = False


class VoteTally:
    """Mutates a room's vote ledger and resolves ejections."""

    def __init__(self, player_registry):
        """Initialize the vote tally.

        Args:
            player_registry: Registry used to look up targets and reset voter flags
        """
        self.player_registry = player_registry

    def cast_vote(self, room: Room, voter: Player, target_id: str) -> VoteReceipt:
        """
        Record a vote from `voter` against `target_id`.

        Raises:
            ValidationError: If the voter already voted this round, the game is not
                running, or the target is not a member of the same room
        """
        if voter.has_voted or voter.id in room.votes:
            raise ValidationError(
                ErrorCode.ALREADY_VOTED,
                'You have already voted this round'
            )

        if not room.started:
            raise ValidationError(
                ErrorCode.GAME_NOT_STARTED,
                'Voting is only possible while the game is running'
            )

        target = self.player_registry.find(target_id) if isinstance(target_id, str) else None
        if target is None or not room.has_member(target_id) or target.room_id != room.id:
            raise ValidationError(
                ErrorCode.INVALID_TARGET,
                'Invalid target player',
                {'target_id': target_id}
            )

        voter.has_voted = True
        room.votes[voter.id] = target_id
        logger.debug(f"Player {voter.id} voted for {target_id} in room {room.id}")

        return VoteReceipt(
            voter_id=voter.id,
            target_id=target_id,
            votes_cast=len(room.votes),
            total_players=len(room.member_ids)
        )

    def is_round_complete(self, room: Room) -> bool:
        return bool(room.member_ids) and len(room.votes) >= len(room.member_ids)

    def resolve(self, room: Room) -> VoteOutcome:
        """
        Resolve the current voting round.

        The most voted target wins, ties going to the target who joined first.
        Votes and voter flags are always cleared. The target is ejected only with
        more than one vote.
        """
        tally = Counter(room.votes.values())
        self.clear_round(room)

        if not tally:
            return VoteOutcome(target_id=None, votes=0)

        def member_index(player_id: str) -> int:
            if player_id in room.member_ids:
                return room.member_ids.index(player_id)
            return len(room.member_ids)

        target_id = min(tally, key=lambda pid: (-tally[pid], member_index(pid)))
        votes = tally[target_id]
        ejected = votes > 1

        logger.info(f"Vote resolved in room {room.id}: {target_id} with {votes} votes (ejected={ejected})")
        return VoteOutcome(target_id=target_id, votes=votes, tally=dict(tally), ejected=ejected)

    def clear_round(self, room: Room) -> None:
        room.votes.clear()
        for player in self.player_registry.get_many(room.member_ids):
            player.has_voted = False

    def discard_member(self, room: Room, player_id: str) -> None:
        """
        Drop a departing member from the ledger.

        Their own vote is removed, and voters who picked them get their vote back.
        """
        room.votes.pop(player_id, None)
        voters = [voter_id for voter_id, target_id in room.votes.items() if target_id == player_id]
        for voter_id in voters:
            del room.votes[voter_id]
            voter = self.player_registry.find(voter_id)
            if voter:
                voter.has_voted = False
