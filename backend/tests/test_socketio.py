import base64

AUDIO = base64.b64encode(b'clip-bytes').decode('ascii')


def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    # Flush any initial events
    sio_client.get_received('/ws')

    # Join a room and expect a joined ack
    sio_client.emit('join_game', {'game_code': 'abcd'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined and joined[0]['args'][0] == {'room': 'game:ABCD'}


def test_join_requires_game_code(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_game', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_state_update_after_recording(sio_client, client):
    sio_client.emit('join_game', {'game_code': 'MAIN'}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    res = client.post('/api/games/MAIN/record-first', json={'audio_data': AUDIO, 'mime_type': 'audio/wav'})
    assert res.status_code == 200
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'state_update' and e['args'][0] == {'game_code': 'MAIN'} for e in events)

    client.post('/api/games/MAIN/reset')
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'state_update' for e in events)


def test_left_room_gets_no_updates(sio_client, client):
    sio_client.emit('join_game', {'game_code': 'MAIN'}, namespace='/ws')
    sio_client.emit('leave_game', {'game_code': 'MAIN'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'left' for pkt in received)

    client.post('/api/games/MAIN/reset')
    events = sio_client.get_received('/ws')
    assert not any(e['name'] == 'state_update' for e in events)
