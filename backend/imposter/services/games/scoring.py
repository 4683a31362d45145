from dataclasses import dataclass
from typing import Optional

from imposter import db
from imposter.models import Elimination, Score
from .tally import Tally, tally_votes

CORRECT_VOTE_POINTS = 100
IMPOSTER_SURVIVAL_POINTS = 150


@dataclass
class RoundOutcome:
    tally: Tally
    imposter_id: str
    eliminated_id: Optional[str]
    imposter_caught: bool


def _increment(lobby_code: str, player_id: str, **deltas) -> None:
    # Single UPDATE ... SET col = col + delta so concurrent writers never lose an increment
    values = {getattr(Score, col): getattr(Score, col) + delta for col, delta in deltas.items()}
    Score.query.filter_by(lobby_code=lobby_code, player_id=player_id).update(values, synchronize_session=False)


def score_round(lobby_code: str, round_number: int, imposter_id: str) -> RoundOutcome:
    """Apply scoring for one round.

    Caught imposter: +100 and one correct vote to each player who voted for
    them. Otherwise (wrong player or nobody eliminated): +150 and one survival
    to the imposter. The imposter's round count always goes up by one, and the
    most-voted player, if any, is eliminated for the rest of the game.

    Runs inside the caller's transaction; the caller commits.
    """
    tally = tally_votes(lobby_code, round_number)
    eliminated_id = tally.target
    caught = eliminated_id is not None and eliminated_id == imposter_id

    if caught:
        for voter_id in tally.voters_for(imposter_id):
            _increment(lobby_code, voter_id, total_score=CORRECT_VOTE_POINTS, correct_votes=1)
    else:
        _increment(lobby_code, imposter_id, total_score=IMPOSTER_SURVIVAL_POINTS, survived_as_imposter=1)
    _increment(lobby_code, imposter_id, rounds_as_imposter=1)

    if eliminated_id is not None:
        already = Elimination.query.filter_by(lobby_code=lobby_code, player_id=eliminated_id).first()
        if not already:
            db.session.add(Elimination(lobby_code=lobby_code, round_number=round_number, player_id=eliminated_id))

    return RoundOutcome(tally=tally, imposter_id=imposter_id, eliminated_id=eliminated_id, imposter_caught=caught)
