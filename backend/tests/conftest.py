import os
import sys
import pytest

# Ensure the backend root (containing the `imposter` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from imposter import create_app, db
from imposter.models import Lobby, Round, seed_categories


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MIN_PLAYERS = 2
    MAX_PLAYERS = 10
    DEFAULT_ROUND_DURATION_SEC = 300
    DEFAULT_TOTAL_ROUNDS = 3
    RANDOM_SEED = 1234
    # Tests drive voting -> results explicitly unless they opt in
    AUTO_RESULTS_ON_ALL_VOTES = False
    POLL_INTERVAL_SEC = 0
    BOT_MIN_DELAY_SEC = 0
    BOT_MAX_DELAY_SEC = 0
    CORS_ORIGINS = []


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import imposter.models  # noqa: F401
        db.create_all()
        seed_categories()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def new_lobby(client):
    """Create a lobby through the API: the first name hosts, the rest join.

    Returns (code, {name: player_id}).
    """
    def _make(*names):
        names = names or ('Alice', 'Bob', 'Cara')
        ids = {name: f'p-{name.lower()}' for name in names}
        host = names[0]
        res = client.post('/api/lobby/create', json={'playerName': host, 'playerId': ids[host]})
        assert res.status_code == 200
        code = res.get_json()['code']
        for name in names[1:]:
            res = client.post('/api/lobby/join', json={'code': code, 'playerName': name, 'playerId': ids[name]})
            assert res.status_code == 200
        return code, ids
    return _make


@pytest.fixture()
def started_game(client, new_lobby):
    """A started game with Alice hosting; the imposter is forced so outcomes are known."""
    def _start(*names, imposter=None, total_rounds=3, duration=300):
        code, ids = new_lobby(*names)
        res = client.post('/api/lobby/start', json={
            'code': code, 'category': 'Animals',
            'roundDurationSeconds': duration, 'totalRounds': total_rounds,
        })
        assert res.status_code == 200
        if imposter:
            force_imposter(code, ids[imposter])
        return code, ids
    return _start


def force_imposter(code, player_id):
    lobby = db.session.get(Lobby, code)
    Round.query.filter_by(lobby_code=code, round_number=lobby.current_round).update(
        {Round.imposter_id: player_id}, synchronize_session=False
    )
    db.session.commit()


def advance(client, code, phase, player_id):
    return client.post('/api/game/phase', json={'code': code, 'phase': phase, 'playerId': player_id})


def vote(client, code, voter_id, target_id):
    return client.post('/api/game/vote', json={'code': code, 'playerId': voter_id, 'votedForId': target_id})
