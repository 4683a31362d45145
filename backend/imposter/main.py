from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import and_, case, func, text
from sqlalchemy.exc import OperationalError

from imposter import db
from imposter.errors import ValidationError
from imposter.models import GameHistory, WordCategory

main = Blueprint('main', __name__)


def _percent(part, whole):
    return int(part * 100 / whole + 0.5) if whole else 0


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Imposter game server!'})


@main.route('/health')
def health():
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        db.session.execute(text('SELECT 1'))
    except OperationalError as exc:
        db.session.rollback()
        current_app.logger.error(f"[health] database unreachable: {exc}")
        return jsonify({'status': 'error', 'database': 'disconnected', 'error': str(exc)}), 503
    return jsonify({'status': 'ok', 'database': 'connected', 'timestamp': timestamp})


@main.route('/categories')
def categories():
    rows = WordCategory.query.order_by(WordCategory.category).all()
    return jsonify({'categories': [c.category for c in rows]})


@main.route('/leaderboard')
def leaderboard():
    """Head-to-head record of one player against everyone they have played with."""
    player_name = (request.args.get('player_name') or '').strip()
    if not player_name:
        raise ValidationError('player_name is required')

    is_player = func.lower(GameHistory.player_name) == player_name.lower()
    won = case((GameHistory.won.is_(True), 1), else_=0)
    was_imposter = case((GameHistory.was_imposter.is_(True), 1), else_=0)
    caught = case((and_(GameHistory.was_imposter.is_(True), GameHistory.caught_as_imposter.is_(True)), 1), else_=0)
    survived = case((and_(GameHistory.was_imposter.is_(True), GameHistory.survived_as_imposter.is_(True)), 1), else_=0)

    games_played = func.count(GameHistory.id).label('games_played')
    wins = func.sum(won).label('wins')
    rows = (
        db.session.query(
            GameHistory.opponent_name,
            games_played,
            wins,
            func.sum(caught).label('times_caught'),
            func.sum(survived).label('times_survived'),
            func.sum(was_imposter).label('times_imposter'),
            func.max(GameHistory.played_at).label('last_played'),
        )
        .filter(is_player)
        .group_by(GameHistory.opponent_name)
        .order_by(games_played.desc(), wins.desc())
        .all()
    )
    board = []
    for row in rows:
        played = int(row.games_played or 0)
        row_wins = int(row.wins or 0)
        board.append({
            'opponent_name': row.opponent_name,
            'games_played': played,
            'wins': row_wins,
            'losses': played - row_wins,
            'win_rate': _percent(row_wins, played),
            'times_caught_as_imposter': int(row.times_caught or 0),
            'times_survived_as_imposter': int(row.times_survived or 0),
            'times_was_imposter': int(row.times_imposter or 0),
            'last_played': row.last_played,
        })

    own = db.session.query(
        func.count(GameHistory.id),
        func.sum(won),
        func.sum(was_imposter),
        func.sum(survived),
    ).filter(is_player).one()
    total_games, total_wins = int(own[0] or 0), int(own[1] or 0)

    return jsonify({
        'player_name': player_name,
        'own_stats': {
            'total_games': total_games,
            'total_wins': total_wins,
            'win_rate': _percent(total_wins, total_games),
            'times_imposter': int(own[2] or 0),
            'times_survived': int(own[3] or 0),
        },
        'leaderboard': board,
    })
