def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_counts_rooms(flask_app, client):
    assert client.get('/health').get_json() == {'status': 'ok', 'rooms': 0}
    flask_app.extensions['inkthink'].membership.create_room('sid-1', 'ROOM1', 'alice')
    assert client.get('/health').get_json()['rooms'] == 1


def test_room_state_hides_secret_word(flask_app, client, scheduler):
    services = flask_app.extensions['inkthink']
    services.membership.create_room('sid-1', 'ROOM1', 'alice')
    services.membership.join_room('sid-2', 'ROOM1', 'bob')
    services.engine.start_game('ROOM1', 'sid-1')
    scheduler.advance(1500)

    res = client.get('/api/rooms/ROOM1')
    assert res.status_code == 200
    state = res.get_json()
    assert state['room_id'] == 'ROOM1'
    assert state['players'] == ['alice', 'bob']
    assert state['game_active'] is True
    assert state['round_active'] is True
    assert state['drawer'] == 'alice'
    assert state['total_rounds'] == 2
    assert services.registry.get('ROOM1').secret_word is not None
    assert 'word' not in state
    assert 'secret_word' not in state


def test_unknown_room_is_404(client):
    res = client.get('/api/rooms/NOPE')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Room not found'}
