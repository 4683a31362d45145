from conftest import advance, vote
from imposter.models import Vote


def test_index(client):
    res = client.get('/api/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    data = res.get_json()
    assert data['status'] == 'ok'
    assert data['database'] == 'connected'
    assert 'timestamp' in data


def test_categories_are_sorted(client):
    res = client.get('/api/categories')
    assert res.get_json()['categories'] == ['Animals', 'Food', 'Movies', 'Sports']


def test_state_of_unknown_game(client):
    res = client.get('/api/game/NOPE22')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Lobby not found', 'kind': 'NotFound'}


def test_snapshot_before_start(client, new_lobby):
    code, ids = new_lobby('Alice', 'Bob')
    state = client.get(f'/api/game/{code}').get_json()
    assert state['lobby']['status'] == 'waiting'
    assert state['round'] is None
    assert state['votes'] == []
    assert state['eliminatedIds'] == []
    assert [p['id'] for p in state['players']] == [ids['Alice'], ids['Bob']]
    assert state['players'][0]['is_host'] is True
    assert [s['player_id'] for s in state['scores']] == [ids['Alice'], ids['Bob']]
    assert state['tally'] is None
    assert isinstance(state['serverTime'], float)


def test_snapshot_during_play(client, started_game):
    code, ids = started_game('Alice', 'Bob', 'Cara', imposter='Cara')
    advance(client, code, 'discussion', ids['Alice'])
    state = client.get(f'/api/game/{code}').get_json()
    rnd = state['round']
    assert rnd['phase'] == 'discussion'
    assert rnd['imposter_id'] == ids['Cara']
    assert rnd['elapsed_seconds'] >= 0
    assert rnd['round_end_time'] is None
    assert state['tally'] is None


def test_vote_is_replaced_not_duplicated(client, started_game):
    code, ids = started_game('Alice', 'Bob', 'Cara', imposter='Cara')
    advance(client, code, 'voting', ids['Alice'])
    assert vote(client, code, ids['Alice'], ids['Bob']).get_json() == {'ok': True}
    assert vote(client, code, ids['Alice'], ids['Cara']).status_code == 200

    rows = Vote.query.filter_by(lobby_code=code, round_number=1, voter_id=ids['Alice']).all()
    assert len(rows) == 1
    assert rows[0].voted_for_id == ids['Cara']
    state = client.get(f'/api/game/{code}').get_json()
    assert state['votes'] == [{'voter_id': ids['Alice'], 'voted_for_id': ids['Cara']}]


def test_vote_validation(client, started_game):
    code, ids = started_game('Alice', 'Bob', 'Cara')

    res = vote(client, code, ids['Alice'], ids['Bob'])
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'InvalidState'

    advance(client, code, 'voting', ids['Alice'])
    res = vote(client, code, ids['Alice'], ids['Alice'])
    assert res.get_json()['kind'] == 'ValidationError'
    res = vote(client, code, ids['Alice'], 'p-nobody')
    assert res.get_json()['kind'] == 'ValidationError'
    res = client.post('/api/game/vote', json={'code': code, 'playerId': ids['Alice']})
    assert res.status_code == 400
    assert Vote.query.filter_by(lobby_code=code).count() == 0


def test_vote_in_unknown_lobby(client):
    res = vote(client, 'ZZZZZZ', 'p-a', 'p-b')
    assert res.status_code == 404


def test_last_vote_shows_results_when_enabled(flask_app, client, started_game):
    flask_app.config['AUTO_RESULTS_ON_ALL_VOTES'] = True
    code, ids = started_game('Alice', 'Bob', 'Cara', imposter='Cara')
    advance(client, code, 'voting', ids['Alice'])

    vote(client, code, ids['Alice'], ids['Cara'])
    vote(client, code, ids['Bob'], ids['Cara'])
    assert client.get(f'/api/game/{code}').get_json()['round']['phase'] == 'voting'

    vote(client, code, ids['Cara'], ids['Alice'])
    state = client.get(f'/api/game/{code}').get_json()
    assert state['round']['phase'] == 'results'
    assert state['eliminatedIds'] == [ids['Cara']]
    assert state['tally'] == {
        'counts': [{'player_id': ids['Cara'], 'votes': 2}, {'player_id': ids['Alice'], 'votes': 1}],
        'target': ids['Cara'],
        'tied': False,
    }
    scores = {s['player_id']: s['total_score'] for s in state['scores']}
    assert scores == {ids['Alice']: 100, ids['Bob']: 100, ids['Cara']: 0}


def test_votes_do_not_close_round_when_disabled(client, started_game):
    code, ids = started_game('Alice', 'Bob', imposter='Bob')
    advance(client, code, 'voting', ids['Alice'])
    vote(client, code, ids['Alice'], ids['Bob'])
    vote(client, code, ids['Bob'], ids['Alice'])
    assert client.get(f'/api/game/{code}').get_json()['round']['phase'] == 'voting'


def test_phase_requires_player_id(client, started_game):
    code, _ = started_game('Alice', 'Bob')
    res = client.post('/api/game/phase', json={'code': code, 'phase': 'discussion'})
    assert res.status_code == 403
    assert res.get_json()['kind'] == 'Forbidden'


def play_single_round_game(client, started_game):
    code, ids = started_game('Alice', 'Bob', imposter='Bob', total_rounds=1)
    advance(client, code, 'voting', ids['Alice'])
    vote(client, code, ids['Alice'], ids['Bob'])
    advance(client, code, 'results', ids['Alice'])
    assert advance(client, code, 'next_round', ids['Alice']).status_code == 200
    return code, ids


def test_leaderboard_after_finished_game(client, started_game):
    code, _ = play_single_round_game(client, started_game)
    assert client.get(f'/api/game/{code}').get_json()['lobby']['status'] == 'finished'

    alice = client.get('/api/leaderboard?player_name=alice').get_json()
    assert alice['own_stats'] == {
        'total_games': 1, 'total_wins': 1, 'win_rate': 100, 'times_imposter': 0, 'times_survived': 0,
    }
    (row,) = alice['leaderboard']
    assert row['opponent_name'] == 'Bob'
    assert (row['games_played'], row['wins'], row['losses'], row['win_rate']) == (1, 1, 0, 100)

    bob = client.get('/api/leaderboard', query_string={'player_name': 'Bob'}).get_json()
    assert bob['own_stats']['times_imposter'] == 1
    assert bob['own_stats']['win_rate'] == 0
    (row,) = bob['leaderboard']
    assert row['opponent_name'] == 'Alice'
    assert row['times_caught_as_imposter'] == 1
    assert row['times_survived_as_imposter'] == 0


def test_leaderboard_for_new_player(client):
    data = client.get('/api/leaderboard?player_name=Nobody').get_json()
    assert data['leaderboard'] == []
    assert data['own_stats']['total_games'] == 0
    assert data['own_stats']['win_rate'] == 0


def test_leaderboard_requires_name(client):
    res = client.get('/api/leaderboard')
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'ValidationError'
