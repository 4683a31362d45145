import time

from flask import current_app

from imposter import db, game_rng
from imposter.errors import (
    InvalidStateError,
    LobbyFullError,
    NotEnoughPlayersError,
    ValidationError,
)
from imposter.models import Lobby, Player, Round, Score
from .rounds import category_words, draw_round
from .state import get_lobby, lobby_players, normalize_code

# No 0/O or 1/I so codes survive being read aloud
LOBBY_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
LOBBY_CODE_LENGTH = 6
AVATAR_COLORS = [
    '#FF6B6B',
    '#4ECDC4',
    '#45B7D1',
    '#FFA07A',
    '#98D8C8',
    '#F7DC6F',
    '#BB8FCE',
    '#85C1E2',
]


def generate_lobby_code(rng=None, length=LOBBY_CODE_LENGTH):
    """Generate a unique, short lobby code."""
    rng = rng or game_rng()
    while True:
        code = ''.join(rng.choices(LOBBY_CODE_ALPHABET, k=length))
        if db.session.get(Lobby, code) is None:
            return code


def _require_new_player(player_name, player_id):
    if not player_name or not player_id:
        raise ValidationError('Player name and ID required')
    if db.session.get(Player, player_id) is not None:
        raise InvalidStateError('This player is already in a lobby')


def _seat_player(lobby_code, player_name, player_id, is_host, seat, rng, now) -> Player:
    player = Player(
        id=player_id,
        lobby_code=lobby_code,
        name=player_name,
        avatar_color=rng.choice(AVATAR_COLORS),
        is_host=is_host,
        seat=seat,
        joined_at=now,
    )
    db.session.add(player)
    db.session.add(Score(lobby_code=lobby_code, player_id=player_id))
    return player


def create_lobby(host_name, host_player_id, rng=None, now=None) -> Player:
    """Create a waiting lobby with the caller seated as host. Returns the host Player."""
    rng = rng or game_rng()
    now = time.time() if now is None else now
    _require_new_player(host_name, host_player_id)
    cfg = current_app.config
    code = generate_lobby_code(rng)
    lobby = Lobby(
        code=code,
        host_player_id=host_player_id,
        status='waiting',
        round_duration_seconds=int(cfg.get('DEFAULT_ROUND_DURATION_SEC', 300)),
        total_rounds=int(cfg.get('DEFAULT_TOTAL_ROUNDS', 3)),
        current_round=1,
        player_count=1,
        created_at=now,
    )
    try:
        db.session.add(lobby)
        host = _seat_player(code, host_name, host_player_id, True, 0, rng, now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(f"[lobby-create] lobby={code} host={host_player_id}")
    return host


def join_lobby(code, player_name, player_id, rng=None, now=None) -> Player:
    """Seat a player in a waiting lobby.

    The seat is claimed with a conditional increment of ``player_count`` so
    concurrent joins can never push a lobby past ``MAX_PLAYERS``.
    """
    rng = rng or game_rng()
    now = time.time() if now is None else now
    if not normalize_code(code):
        raise ValidationError('Code, player name, and ID required')
    lobby = get_lobby(code)
    if lobby.status != 'waiting':
        raise InvalidStateError('Game already started')
    max_players = int(current_app.config.get('MAX_PLAYERS', 10))
    if lobby.player_count >= max_players:
        raise LobbyFullError('Lobby is full')
    _require_new_player(player_name, player_id)
    try:
        claimed = Lobby.query.filter(
            Lobby.code == lobby.code,
            Lobby.status == 'waiting',
            Lobby.player_count < max_players,
        ).update({Lobby.player_count: Lobby.player_count + 1}, synchronize_session=False)
        if not claimed:
            db.session.rollback()
            db.session.refresh(lobby)
            if lobby.status != 'waiting':
                raise InvalidStateError('Game already started')
            raise LobbyFullError('Lobby is full')
        seat = db.session.query(Lobby.player_count).filter_by(code=lobby.code).scalar() - 1
        player = _seat_player(lobby.code, player_name, player_id, False, seat, rng, now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(f"[lobby-join] lobby={lobby.code} player={player_id} seat={seat}")
    return player


def _positive_int(value, default, field):
    if value is None or value == '':
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a whole number')
    if number < 1:
        raise ValidationError(f'{field} must be at least 1')
    return number


def start_game(code, category, round_duration_seconds=None, total_rounds=None, rng=None, now=None) -> Round:
    """Move a waiting lobby to playing and create round 1."""
    rng = rng or game_rng()
    now = time.time() if now is None else now
    if not normalize_code(code) or not category:
        raise ValidationError('Code and category required')
    lobby = get_lobby(code)
    if lobby.status != 'waiting':
        raise InvalidStateError('Game has already started or is finished')

    players = lobby_players(lobby.code)
    # Enforce minimum players (configurable)
    min_players = int(current_app.config.get('MIN_PLAYERS', 2))
    if len(players) < min_players:
        raise NotEnoughPlayersError(f'Need at least {min_players} players')

    cfg = current_app.config
    duration = _positive_int(round_duration_seconds, int(cfg.get('DEFAULT_ROUND_DURATION_SEC', 300)), 'roundDurationSeconds')
    rounds = _positive_int(total_rounds, int(cfg.get('DEFAULT_TOTAL_ROUNDS', 3)), 'totalRounds')
    category_words(category)

    try:
        claimed = Lobby.query.filter_by(code=lobby.code, status='waiting').update({
            Lobby.status: 'playing',
            Lobby.category: category,
            Lobby.round_duration_seconds: duration,
            Lobby.total_rounds: rounds,
            Lobby.current_round: 1,
        }, synchronize_session=False)
        if not claimed:
            raise InvalidStateError('Game has already started or is finished')
        db.session.refresh(lobby)
        first = draw_round(lobby, 1, players, rng=rng, now=now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(
        f"[start] lobby={lobby.code} players={len(players)} category={category} rounds={rounds} duration={duration}s"
    )
    return first
