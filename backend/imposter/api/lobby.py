from flask import Blueprint, jsonify, request
from imposter.services.games.lobby import create_lobby, join_lobby, start_game
from imposter.services.games.state import get_lobby, lobby_players


lobby = Blueprint('lobby', __name__)


def _player_payload(player):
    return {
        'code': player.lobby_code,
        'playerId': player.id,
        'playerName': player.name,
        'avatarColor': player.avatar_color,
        'isHost': player.is_host,
    }


@lobby.route('/create', methods=['POST'])
def create():
    data = request.get_json(silent=True) or {}
    host = create_lobby(data.get('playerName'), data.get('playerId'))
    return jsonify(_player_payload(host))


@lobby.route('/join', methods=['POST'])
def join():
    data = request.get_json(silent=True) or {}
    player = join_lobby(data.get('code'), data.get('playerName'), data.get('playerId'))
    return jsonify(_player_payload(player))


@lobby.route('/start', methods=['POST'])
def start():
    data = request.get_json(silent=True) or {}
    # Older clients send roundDuration
    duration = data.get('roundDurationSeconds', data.get('roundDuration'))
    start_game(data.get('code'), data.get('category'), duration, data.get('totalRounds'))
    return jsonify({'ok': True})


@lobby.route('/<string:code>', methods=['GET'])
def waiting_room(code):
    found = get_lobby(code)
    return jsonify({
        'lobby': found.to_dict(),
        'players': [p.to_dict() for p in lobby_players(found.code)],
    })
