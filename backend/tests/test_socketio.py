from numguess import socketio


def test_socket_connect_and_join_player(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)

    sio_client.emit('join_player', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined
    assert joined[0]['args'][0]['room'].startswith('player:')


def test_anonymous_socket_cannot_join(flask_app):
    anon = socketio.test_client(flask_app, namespace='/ws')
    try:
        anon.get_received('/ws')
        anon.emit('join_player', {}, namespace='/ws')
        received = anon.get_received('/ws')
        assert any(pkt['name'] == 'error' for pkt in received)
    finally:
        anon.disconnect(namespace='/ws')


def test_game_updates_pushed_to_owner(sio_client, auth_client):
    sio_client.emit('join_player', {}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    game = auth_client.post('/api/games', json={}).get_json()['data']
    events = [e for e in sio_client.get_received('/ws') if e['name'] == 'game_update']
    assert events
    assert events[-1]['args'][0] == {'game_id': game['id'], 'status': 'InProgress', 'attempts_count': 0}

    auth_client.post(f"/api/games/{game['id']}/abandon")
    events = [e for e in sio_client.get_received('/ws') if e['name'] == 'game_update']
    assert events[-1]['args'][0]['status'] == 'Abandoned'


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)
