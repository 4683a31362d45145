from flask import Blueprint, current_app, jsonify, request
from imposter.services.games.rounds import advance_phase, close_voting
from imposter.services.games.state import game_snapshot
from imposter.services.games.voting import all_votes_in, cast_vote


game = Blueprint('game', __name__)


@game.route('/<string:code>', methods=['GET'])
def get_game_state(code):
    return jsonify(game_snapshot(code))


@game.route('/vote', methods=['POST'])
def vote():
    data = request.get_json(silent=True) or {}
    code = data.get('code')
    cast_vote(code, data.get('playerId'), data.get('votedForId'))
    # Early auto-advance: once every eligible player has voted, show results
    if current_app.config.get('AUTO_RESULTS_ON_ALL_VOTES') and all_votes_in(code):
        close_voting(code)
    return jsonify({'ok': True})


@game.route('/phase', methods=['POST'])
def phase():
    data = request.get_json(silent=True) or {}
    advance_phase(data.get('code'), data.get('phase'), data.get('playerId'))
    return jsonify({'ok': True})
