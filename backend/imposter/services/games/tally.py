from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from imposter.models import Vote


@dataclass
class Tally:
    """Vote counts for one round, most-voted first.

    Candidates with equal counts keep the order in which their first vote
    row was stored, so the elimination target of a tie is stable.
    """
    ballots: List[Tuple[str, str]] = field(default_factory=list)  # (voter_id, voted_for_id)
    ranked: List[Tuple[str, int]] = field(default_factory=list)

    @classmethod
    def from_ballots(cls, ballots):
        ballots = list(ballots)
        ranked = Counter(target for _, target in ballots).most_common()
        return cls(ballots=ballots, ranked=ranked)

    @property
    def target(self) -> Optional[str]:
        return self.ranked[0][0] if self.ranked else None

    @property
    def tied(self) -> bool:
        return len(self.ranked) > 1 and self.ranked[0][1] == self.ranked[1][1]

    def voters_for(self, player_id: str) -> List[str]:
        return [voter for voter, target in self.ballots if target == player_id]

    def to_dict(self):
        return {
            'counts': [{'player_id': pid, 'votes': n} for pid, n in self.ranked],
            'target': self.target,
            'tied': self.tied,
        }


def tally_votes(lobby_code: str, round_number: int) -> Tally:
    votes = Vote.query.filter_by(lobby_code=lobby_code, round_number=round_number).order_by(Vote.id).all()
    return Tally.from_ballots((v.voter_id, v.voted_for_id) for v in votes)
