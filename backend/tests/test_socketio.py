from tally import socketio


def _events(sio, name):
    return [pkt['args'][0] for pkt in sio.get_received() if pkt['name'] == name]


def test_socket_connect_and_join(sio_client, flask_app):
    assert sio_client.is_connected()
    received = sio_client.get_received()
    assert any(pkt['name'] == 'connected' for pkt in received)

    sio_client.emit('join-room', '4821')
    received = sio_client.get_received()
    assert {'name': 'joined', 'args': [{'code': '4821'}], 'namespace': '/'} in received
    registry = flask_app.extensions['broadcaster'].registry
    assert len(registry.members('4821')) == 1


def test_join_accepts_dict_and_rejects_bad_codes(sio_client, flask_app):
    sio_client.get_received()
    sio_client.emit('join-room', {'code': '0007'})
    assert _events(sio_client, 'joined') == [{'code': '0007'}]
    sio_client.emit('join-room', 'abc')
    errors = _events(sio_client, 'error')
    assert errors and 'room code' in errors[0]['message']


def test_score_updates_fan_out_to_joined_sessions(flask_app, client, make_room):
    room, (alice, _) = make_room('Alice', 'Bob')
    code = room['code']
    first = socketio.test_client(flask_app)
    second = socketio.test_client(flask_app)
    outsider = socketio.test_client(flask_app)
    first.emit('join-room', code)
    second.emit('join-room', code)
    outsider.emit('join-room', '0000' if code != '0000' else '0001')
    for sio in (first, second, outsider):
        sio.get_received()

    game = client.post(f'/api/rooms/{code}/games').get_json()
    score_id = next(s['id'] for s in game['scores'] if s['participantId'] == alice['id'])
    client.post(f'/api/scores/{score_id}/increment')
    client.post(f'/api/scores/{score_id}/increment')
    client.post(f'/api/scores/{score_id}/decrement')

    for sio in (first, second):
        received = sio.get_received()
        names = [pkt['name'] for pkt in received]
        assert names == ['game-started', 'score-updated', 'score-updated', 'score-updated']
        updates = [pkt['args'][0] for pkt in received if pkt['name'] == 'score-updated']
        assert [u['value'] for u in updates] == [1, 2, 1]
        assert updates[0] == {
            'scoreId': score_id,
            'participantId': alice['id'],
            'value': 1,
            'participantName': 'Alice',
        }
    assert outsider.get_received() == []

    for sio in (first, second, outsider):
        sio.disconnect()


def test_participant_added_and_game_ended_events(flask_app, client, sio_client, make_room):
    room, _ = make_room()
    code = room['code']
    sio_client.emit('join-room', code)
    sio_client.get_received()

    client.post(f'/api/rooms/{code}/participants', json={'name': 'Alice'})
    client.post(f'/api/rooms/{code}/participants', json={'name': 'Bob'})
    added = _events(sio_client, 'participant-added')
    assert [p['name'] for p in added] == ['Alice', 'Bob']

    game = client.post(f'/api/rooms/{code}/games').get_json()
    sio_client.get_received()
    client.post(f"/api/games/{game['id']}/end")
    client.post(f"/api/games/{game['id']}/end")
    ended = _events(sio_client, 'game-ended')
    assert len(ended) == 1
    assert ended[0]['id'] == game['id']
    assert ended[0]['room']['code'] == code


def test_leave_room_stops_events(flask_app, client, sio_client, make_room):
    room, _ = make_room()
    code = room['code']
    sio_client.emit('join-room', code)
    sio_client.emit('leave-room', code)
    assert _events(sio_client, 'left') == [{'code': code}]
    client.post(f'/api/rooms/{code}/participants', json={'name': 'Alice'})
    assert _events(sio_client, 'participant-added') == []
    assert flask_app.extensions['broadcaster'].registry.members(code) == set()


def test_joining_second_room_keeps_first(flask_app, client, sio_client, make_room):
    room_a, _ = make_room()
    room_b, _ = make_room()
    sio_client.emit('join-room', room_a['code'])
    sio_client.emit('join-room', room_b['code'])
    sio_client.get_received()
    client.post(f"/api/rooms/{room_a['code']}/participants", json={'name': 'Alice'})
    client.post(f"/api/rooms/{room_b['code']}/participants", json={'name': 'Bob'})
    assert [p['name'] for p in _events(sio_client, 'participant-added')] == ['Alice', 'Bob']


def test_disconnect_drops_membership(flask_app):
    registry = flask_app.extensions['broadcaster'].registry
    sio = socketio.test_client(flask_app)
    sio.emit('join-room', '1234')
    sio.emit('join-room', '5678')
    assert len(registry.members('1234')) == 1
    sio.disconnect()
    assert registry.members('1234') == set()
    assert registry.members('5678') == set()


def test_registry_tracks_channels_per_session(flask_app):
    registry = flask_app.extensions['broadcaster'].registry
    sio = socketio.test_client(flask_app)
    sio.emit('join-room', '1111')
    sio.emit('join-room', '2222')
    [sid] = registry.members('1111')
    assert registry.channels_for(sid) == {'1111', '2222'}
    sio.emit('leave-room', '1111')
    assert registry.channels_for(sid) == {'2222'}
    sio.disconnect()
    assert registry.channels_for(sid) == set()
