"""Round Engine: the per-lobby phase state machine.

word_reveal -> discussion -> voting -> results, then either the next
round's word_reveal or the lobby is finished. Phases only move forward.
Every transition is a conditional UPDATE on the row state that was read,
so two clients racing on the same transition apply it once; the loser is a
no-op.
"""

import random
import time
from typing import List, Optional

from flask import current_app

from imposter import db, game_rng
from imposter.errors import ForbiddenError, InvalidStateError, ValidationError
from imposter.models import PHASES, GameHistory, Lobby, Player, Round, Score, WordCategory
from .scoring import score_round
from .state import get_lobby, current_round, lobby_players, active_players, normalize_code

PHASE_ORDER = {phase: idx for idx, phase in enumerate(PHASES)}
TRANSITIONS = ('discussion', 'voting', 'results', 'next_round')


def category_words(category: str) -> List[str]:
    row = db.session.get(WordCategory, category) if category else None
    if row is None:
        raise ValidationError('Invalid category')
    words = row.word_list
    if not words:
        raise ValidationError(f'Category {category} has no words')
    return words


def draw_round(lobby: Lobby, round_number: int, candidates: List[Player],
               rng: Optional[random.Random] = None, now: Optional[float] = None) -> Round:
    """Pick an imposter among ``candidates`` and a word from the lobby's category."""
    rng = rng or game_rng()
    now = time.time() if now is None else now
    words = category_words(lobby.category)
    imposter = rng.choice(candidates)
    word = rng.choice(words)
    rnd = Round(
        lobby_code=lobby.code,
        round_number=round_number,
        imposter_id=imposter.id,
        word=word,
        category=lobby.category,
        phase='word_reveal',
        round_start_time=now,
    )
    db.session.add(rnd)
    return rnd


def advance_phase(code, target_phase, player_id, rng=None, now=None):
    """Host-requested transition. Returns the affected Round, or the Lobby when the game ends."""
    if target_phase not in TRANSITIONS:
        raise ValidationError(f'Unknown phase: {target_phase}')
    if not normalize_code(code):
        raise ValidationError('Code and phase required')
    lobby = get_lobby(code)
    player = Player.query.filter_by(id=player_id, lobby_code=lobby.code).first() if player_id else None
    if not player or not player.is_host:
        raise ForbiddenError('Only the host may change the phase')
    if lobby.status != 'playing':
        raise InvalidStateError('Game is not in progress')
    if target_phase == 'next_round':
        return _next_round_or_finish(lobby, rng=rng, now=now)
    return _set_phase(lobby, target_phase, now=now)


def close_voting(code, now=None) -> Optional[Round]:
    """Server-initiated voting -> results once every eligible player has voted."""
    lobby = get_lobby(code)
    rnd = current_round(lobby)
    if lobby.status != 'playing' or rnd is None or rnd.phase != 'voting':
        return rnd
    return _set_phase(lobby, 'results', now=now)


def _set_phase(lobby: Lobby, target: str, now=None) -> Round:
    now = time.time() if now is None else now
    rnd = current_round(lobby)
    if rnd is None:
        raise InvalidStateError('Round not initialized')
    seen = rnd.phase
    if seen == target:
        current_app.logger.info(f"[phase-skip] lobby={lobby.code} round={rnd.round_number} already {target}")
        return rnd
    if PHASE_ORDER[target] < PHASE_ORDER[seen]:
        raise InvalidStateError(f'Cannot go back from {seen} to {target}')

    values = {Round.phase: target}
    if target == 'discussion':
        values[Round.round_start_time] = now
    elif target == 'results':
        values[Round.round_end_time] = now

    outcome = None
    try:
        claimed = Round.query.filter_by(id=rnd.id, phase=seen).update(values, synchronize_session=False)
        if not claimed:
            db.session.rollback()
            current_app.logger.info(f"[phase-skip] lobby={lobby.code} round={rnd.round_number} lost race for {target}")
            db.session.refresh(rnd)
            return rnd
        if target == 'results':
            outcome = score_round(lobby.code, rnd.round_number, rnd.imposter_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"[phase] lobby={lobby.code} round={rnd.round_number} {seen} -> {target}")
    if outcome is not None:
        current_app.logger.info(
            f"[results] lobby={lobby.code} round={rnd.round_number} imposter={outcome.imposter_id} "
            f"eliminated={outcome.eliminated_id} caught={outcome.imposter_caught} tied={outcome.tally.tied}"
        )
    db.session.refresh(rnd)
    return rnd


def _next_round_or_finish(lobby: Lobby, rng=None, now=None):
    now = time.time() if now is None else now
    rnd = current_round(lobby)
    if rnd is None or rnd.phase != 'results':
        raise InvalidStateError('Round results must be shown before moving on')

    prev_round = lobby.current_round
    guard = Lobby.query.filter_by(code=lobby.code, status='playing', current_round=prev_round)

    if prev_round + 1 > lobby.total_rounds:
        try:
            claimed = guard.update({Lobby.status: 'finished'}, synchronize_session=False)
            if not claimed:
                db.session.rollback()
                current_app.logger.info(f"[phase-skip] lobby={lobby.code} already finished")
                return lobby
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        db.session.refresh(lobby)
        current_app.logger.info(f"[finish] lobby={lobby.code} finished at round={prev_round}")
        record_game_history(lobby.code, now=now)
        return lobby

    candidates = active_players(lobby.code)
    try:
        claimed = guard.update({Lobby.current_round: prev_round + 1}, synchronize_session=False)
        if not claimed:
            db.session.rollback()
            current_app.logger.info(f"[phase-skip] lobby={lobby.code} round {prev_round} already advanced")
            db.session.refresh(lobby)
            return current_round(lobby)
        new_round = draw_round(lobby, prev_round + 1, candidates, rng=rng, now=now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    db.session.refresh(lobby)
    current_app.logger.info(f"[next_round] lobby={lobby.code} advance round {prev_round} -> {lobby.current_round}")
    return new_round


def record_game_history(code: str, now=None) -> int:
    """Write one history row per ordered pair of players. Best-effort.

    Returns the number of rows written; failures are logged and rolled back.
    """
    now = time.time() if now is None else now
    try:
        players = lobby_players(code)
        if len(players) < 2:
            return 0
        scores = {s.player_id: s for s in Score.query.filter_by(lobby_code=code).all()}

        def stat(player, col):
            row = scores.get(player.id)
            return getattr(row, col) if row else 0

        # max() keeps the first of equal scores, i.e. the lowest seat
        winner = max(players, key=lambda p: stat(p, 'total_score'))
        written = 0
        for player in players:
            rounds_as_imposter = stat(player, 'rounds_as_imposter')
            survived = stat(player, 'survived_as_imposter')
            was_imposter = rounds_as_imposter > 0
            survived_as_imposter = survived > 0
            caught = was_imposter and not survived_as_imposter and rounds_as_imposter > survived
            for opponent in players:
                if opponent.id == player.id:
                    continue
                db.session.add(GameHistory(
                    lobby_code=code,
                    player_id=player.id,
                    player_name=player.name,
                    opponent_id=opponent.id,
                    opponent_name=opponent.name,
                    won=player.id == winner.id,
                    was_imposter=was_imposter,
                    caught_as_imposter=caught,
                    survived_as_imposter=survived_as_imposter,
                    played_at=now,
                ))
                written += 1
        db.session.commit()
        current_app.logger.info(f"[history] lobby={code} rows={written} winner={winner.id}")
        return written
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"[history-error] lobby={code}")
        return 0
