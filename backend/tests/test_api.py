import re


def _state(client, code, user_id=None):
    url = f'/api/rooms/{code}/state'
    if user_id:
        url += f'?user_id={user_id}'
    return client.get(url).get_json()


def _start(client, code, user_id='user_alice0001'):
    return client.post(f'/api/rooms/{code}/start', json={'user_id': user_id})


def _say(client, code, user_id, text):
    return client.post(f'/api/rooms/{code}/messages', json={'user_id': user_id, 'text': text})


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    health = client.get('/health').get_json()
    assert health['status'] == 'ok'
    assert health['rooms'] == 0


def test_create_room(client):
    res = client.post('/api/rooms/create', json={'name': 'Alice'})
    assert res.status_code == 201
    data = res.get_json()
    assert re.fullmatch(r'[0-9A-Z]{6}', data['room_code'])
    assert re.fullmatch(r'user_[0-9a-z]{9}', data['player']['id'])
    assert data['player']['is_host'] is True

    state = _state(client, data['room_code'])
    assert state['status'] == 'waiting'
    assert state['round'] == 0
    assert state['drawer_id'] is None
    assert state['host_id'] == data['player']['id']


def test_create_room_requires_nickname(client):
    assert client.post('/api/rooms/create', json={'name': '   '}).status_code == 400
    assert client.post('/api/rooms/create', json={'name': 'x' * 21}).status_code == 400


def test_join_and_state(client, room):
    state = _state(client, room.lower())
    assert state['code'] == room
    names = [p['name'] for p in state['players']]
    assert names == ['Alice', 'Bob', 'Cara']
    assert [p['is_host'] for p in state['players']] == [True, False, False]


def test_join_errors(client, room):
    assert client.post('/api/rooms/join', json={'name': 'Dan'}).status_code == 400
    assert client.post('/api/rooms/join', json={'room_code': 'NOPE00', 'name': 'Dan'}).status_code == 404
    assert client.post('/api/rooms/join', json={'room_code': room, 'name': ''}).status_code == 400
    # MAX_PLAYERS is 4 in tests
    assert client.post('/api/rooms/join', json={'room_code': room, 'name': 'Dan'}).status_code == 201
    res = client.post('/api/rooms/join', json={'room_code': room, 'name': 'Eve'})
    assert res.status_code == 403


def test_rejoin_returns_existing_player(client, room):
    res = client.post('/api/rooms/join', json={'room_code': room, 'name': 'Bobby', 'user_id': 'user_bob000001'})
    assert res.status_code == 200
    assert res.get_json()['name'] == 'Bob'
    assert len(_state(client, room)['players']) == 3


def test_user_id_must_have_generated_shape(client, room):
    for bad in ({'x': 1}, 'system', 'user_BOB000001', 'user_short', 42):
        res = client.post('/api/rooms/create', json={'name': 'Mallory', 'user_id': bad})
        assert res.status_code == 400
        assert 'user_id' in res.get_json()['error']
        res = client.post('/api/rooms/join', json={'room_code': room, 'name': 'Mallory', 'user_id': bad})
        assert res.status_code == 400
    assert len(_state(client, room)['players']) == 3
    assert client.get('/health').get_json()['rooms'] == 1


def test_unknown_room_is_404(client):
    assert client.get('/api/rooms/ZZZZZZ/state').status_code == 404
    assert client.get('/api/rooms/ZZZZZZ/messages').get_json() == {'error': 'Not found'}


def test_start_requires_host_and_enough_players(client):
    code = client.post('/api/rooms/create', json={'name': 'Alice', 'user_id': 'user_alice0001'}).get_json()['room_code']
    res = _start(client, code)
    assert res.status_code == 400
    assert 'At least 2 players' in res.get_json()['error']

    client.post('/api/rooms/join', json={'room_code': code, 'name': 'Bob', 'user_id': 'user_bob000001'})
    assert _start(client, code, 'user_bob000001').status_code == 403
    assert _start(client, code, 'user_nobody').status_code == 404
    assert _start(client, code).status_code == 200


def test_start_opens_first_turn(client, room):
    res = _start(client, room)
    assert res.status_code == 200
    started = res.get_json()
    assert started['status'] == 'playing'
    assert started['round'] == 1
    assert started['timer'] == 60
    assert started['drawer_id'] == 'user_alice0001'
    # The host asked, and the host is drawing
    assert started['current_word'] == 'apple'

    # Starting twice is idempotent
    again = _start(client, room).get_json()
    assert again['round'] == 1

    assert _state(client, room, 'user_alice0001')['current_word'] == 'apple'
    assert _state(client, room, 'user_bob000001')['current_word'] is None
    assert _state(client, room)['current_word'] is None

    messages = client.get(f'/api/rooms/{room}/messages').get_json()
    assert messages[-1]['is_system'] is True
    assert messages[-1]['sender_id'] == 'system'
    assert messages[-1]['text'] == 'Round 1 started! A drawer has been chosen.'


def test_chat_message_is_posted(client, room):
    res = _say(client, room, 'user_bob000001', '  hello there  ')
    assert res.status_code == 201
    body = res.get_json()
    assert body['correct'] is False
    assert body['message']['text'] == 'hello there'
    assert body['message']['sender_name'] == 'Bob'

    assert _say(client, room, 'user_bob000001', '   ').status_code == 400
    assert _say(client, room, 'user_ghost', 'hi').status_code == 404

    messages = client.get(f'/api/rooms/{room}/messages').get_json()
    assert [m['text'] for m in messages] == ['hello there']
    after = client.get(f"/api/rooms/{room}/messages?after={messages[0]['id']}").get_json()
    assert after == []


def test_guessing_the_word_scores_and_rotates_drawer(client, room):
    _start(client, room)
    assert _say(client, room, 'user_alice0001', 'apple').status_code == 403

    wrong = _say(client, room, 'user_bob000001', 'banana').get_json()
    assert wrong['correct'] is False

    res = _say(client, room, 'user_cara00001', ' Apple ')
    assert res.status_code == 201
    assert res.get_json()['correct'] is True
    assert res.get_json()['points'] == 10

    state = _state(client, room)
    assert state['round'] == 2
    assert state['drawer_id'] == 'user_bob000001'
    assert state['timer'] == 60
    assert state['players'][0]['name'] == 'Cara'
    assert state['players'][0]['score'] == 10

    texts = [m['text'] for m in client.get(f'/api/rooms/{room}/messages').get_json()]
    assert 'Apple' not in texts
    assert texts[-2:] == ['Cara guessed the word [apple]!', 'Round 2 started! A drawer has been chosen.']

    # Rotation wraps around the join order
    _say(client, room, 'user_alice0001', 'apple')
    assert _state(client, room)['drawer_id'] == 'user_cara00001'
    _say(client, room, 'user_alice0001', 'apple')
    assert _state(client, room)['drawer_id'] == 'user_alice0001'


def test_guess_outside_turn_is_plain_chat(client, room):
    res = _say(client, room, 'user_bob000001', 'apple').get_json()
    assert res['correct'] is False
    assert _state(client, room)['players'][1]['score'] == 0


def test_canvas_drawing_rules(client, room):
    url = f'/api/rooms/{room}/canvas'
    point = {'user_id': 'user_alice0001', 'type': 'start', 'x': 10, 'y': 20.5, 'color': '#EF4444', 'size': 5}
    assert client.post(url, json=point).status_code == 409

    _start(client, room)
    assert client.post(url, json=point).status_code == 201
    assert client.post(url, json=dict(point, type='move', x=11)).status_code == 201
    assert client.post(url, json={'user_id': 'user_alice0001', 'type': 'end'}).status_code == 201

    assert client.post(url, json=dict(point, user_id='user_bob000001')).status_code == 403
    assert client.post(url, json=dict(point, type='smudge')).status_code == 400
    assert client.post(url, json=dict(point, color='red')).status_code == 400
    assert client.post(url, json=dict(point, size=50)).status_code == 400
    assert client.post(url, json=dict(point, x='left')).status_code == 400

    points = client.get(url).get_json()
    assert [p['type'] for p in points] == ['start', 'move', 'end']
    assert points[0]['color'] == '#ef4444'
    assert points[2] == {'id': points[2]['id'], 'type': 'end'}

    assert client.delete(url, json={'user_id': 'user_bob000001'}).status_code == 403
    assert client.delete(url).status_code == 400
    res = client.delete(url, json={'user_id': 'user_alice0001'})
    assert res.get_json()['removed'] == 3
    assert client.get(url).get_json() == []


def test_next_turn_clears_canvas(client, room):
    _start(client, room)
    url = f'/api/rooms/{room}/canvas'
    client.post(url, json={'user_id': 'user_alice0001', 'type': 'start', 'x': 1, 'y': 1, 'color': '#000000', 'size': 3})
    _say(client, room, 'user_bob000001', 'apple')
    assert client.get(url).get_json() == []


def test_scoreboard_orders_by_score(client, room):
    _start(client, room)
    _say(client, room, 'user_cara00001', 'apple')   # Bob draws next
    _say(client, room, 'user_cara00001', 'apple')   # Cara draws next
    _say(client, room, 'user_bob000001', 'apple')
    board = client.get(f'/api/rooms/{room}/scoreboard').get_json()
    assert [(p['name'], p['score']) for p in board] == [('Cara', 20), ('Bob', 10), ('Alice', 0)]
    assert [p['is_drawer'] for p in board] == [False, False, True]


def test_host_leaving_hands_over_host(client, room):
    res = client.post(f'/api/rooms/{room}/leave', json={'user_id': 'user_alice0001'})
    assert res.status_code == 200
    assert res.get_json()['room_closed'] is False
    state = _state(client, room)
    assert state['host_id'] == 'user_bob000001'
    assert [p['name'] for p in state['players']] == ['Bob', 'Cara']

    assert client.post(f'/api/rooms/{room}/leave', json={'user_id': 'user_alice0001'}).status_code == 404


def test_drawer_leaving_advances_turn(client, room):
    _start(client, room)
    client.post(f'/api/rooms/{room}/leave', json={'user_id': 'user_alice0001'})
    state = _state(client, room)
    assert state['status'] == 'playing'
    assert state['round'] == 2
    assert state['drawer_id'] == 'user_bob000001'


def test_too_few_players_returns_room_to_waiting(client, room):
    _start(client, room)
    client.post(f'/api/rooms/{room}/leave', json={'user_id': 'user_cara00001'})
    assert _state(client, room)['status'] == 'playing'
    client.post(f'/api/rooms/{room}/leave', json={'user_id': 'user_bob000001'})
    state = _state(client, room)
    assert state['status'] == 'waiting'
    assert state['drawer_id'] is None
    assert state['timer'] == 0
    assert state['round'] == 0

    # A fresh game counts rounds from the start again
    client.post('/api/rooms/join', json={'room_code': room, 'name': 'Dan', 'user_id': 'user_dan000001'})
    restarted = _start(client, room).get_json()
    assert restarted['round'] == 1
    assert restarted['drawer_id'] == 'user_alice0001'
    texts = [m['text'] for m in client.get(f'/api/rooms/{room}/messages').get_json()]
    assert texts[-1] == 'Round 1 started! A drawer has been chosen.'


def test_last_player_leaving_closes_room(client):
    code = client.post('/api/rooms/create', json={'name': 'Alice', 'user_id': 'user_alice0001'}).get_json()['room_code']
    _say(client, code, 'user_alice0001', 'anyone here?')
    res = client.post(f'/api/rooms/{code}/leave', json={'user_id': 'user_alice0001'})
    assert res.get_json()['room_closed'] is True
    assert client.get(f'/api/rooms/{code}/state').status_code == 404


def test_game_ends_after_total_rounds_and_can_restart(flask_app, client, room):
    flask_app.config['TOTAL_ROUNDS'] = 2
    _start(client, room)
    _say(client, room, 'user_bob000001', 'apple')  # round 1 -> 2
    _say(client, room, 'user_cara00001', 'apple')  # round 2 -> end
    state = _state(client, room, 'user_cara00001')
    assert state['status'] == 'ended'
    assert state['drawer_id'] is None
    assert state['current_word'] is None
    assert state['total_rounds'] == 2
    assert state['winner'] == 'Bob'
    texts = [m['text'] for m in client.get(f'/api/rooms/{room}/messages').get_json()]
    assert texts[-1] == 'Game over! Bob wins with 10 points.'

    # Cannot draw or guess after the end
    assert _say(client, room, 'user_bob000001', 'apple').get_json()['correct'] is False

    restarted = _start(client, room).get_json()
    assert restarted['status'] == 'playing'
    assert restarted['round'] == 1
    assert restarted['winner'] is None
    assert restarted['drawer_id'] == 'user_alice0001'
    assert all(p['score'] == 0 for p in restarted['players'])
