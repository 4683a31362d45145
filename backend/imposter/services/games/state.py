"""Read-side helpers and the polled game snapshot.

Everything here only reads from the store. The Round Engine and the vote
service build on these lookups; ``game_snapshot`` is what every polling
client receives from ``GET /api/game/<code>``.
"""

import time
from typing import List, Optional

from imposter import db
from imposter.errors import NotFoundError
from imposter.models import Lobby, Player, Round, Vote, Elimination, Score
from .tally import tally_votes


def normalize_code(code) -> str:
    return (code or '').strip().upper()


def get_lobby(code) -> Lobby:
    lobby = db.session.get(Lobby, normalize_code(code))
    if lobby is None:
        raise NotFoundError('Lobby not found')
    return lobby


def current_round(lobby: Lobby) -> Optional[Round]:
    return Round.query.filter_by(lobby_code=lobby.code, round_number=lobby.current_round).first()


def lobby_players(code: str) -> List[Player]:
    return Player.query.filter_by(lobby_code=code).order_by(Player.seat).all()


def eliminated_ids(code: str) -> List[str]:
    rows = Elimination.query.filter_by(lobby_code=code).order_by(Elimination.round_number).all()
    return [e.player_id for e in rows]


def active_players(code: str) -> List[Player]:
    """Players of the lobby that have never been eliminated."""
    gone = set(eliminated_ids(code))
    return [p for p in lobby_players(code) if p.id not in gone]


def game_snapshot(code, now=None) -> dict:
    now = time.time() if now is None else now
    lobby = get_lobby(code)
    rnd = current_round(lobby) if lobby.status != 'waiting' else None
    votes = (
        Vote.query.filter_by(lobby_code=lobby.code, round_number=lobby.current_round).order_by(Vote.id).all()
        if rnd else []
    )
    scores = Score.query.filter_by(lobby_code=lobby.code).order_by(Score.id).all()
    # Reported once the round reaches results
    tally = tally_votes(lobby.code, rnd.round_number) if rnd and rnd.phase == 'results' else None
    return {
        'lobby': lobby.to_dict(),
        'round': rnd.to_dict(now) if rnd else None,
        'players': [p.to_dict() for p in lobby_players(lobby.code)],
        'eliminatedIds': eliminated_ids(lobby.code),
        'votes': [v.to_dict() for v in votes],
        'scores': [s.to_dict() for s in scores],
        'tally': tally.to_dict() if tally else None,
        'serverTime': now,
    }
