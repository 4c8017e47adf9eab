from flask import Blueprint, jsonify, request, current_app
from drawguess.models import Room
from drawguess.services.rooms import canvas, chat, guesses, lobby, turns
from drawguess.services.rooms.errors import RoomError
from drawguess.services.rooms.scheduler import schedule_turn_timer as svc_schedule_turn_timer
from drawguess.services.rooms.scoring import leaderboard


rooms = Blueprint('rooms', __name__)


@rooms.errorhandler(RoomError)
def handle_room_error(exc: RoomError):
    return jsonify(exc.to_dict()), exc.status


def _get_room(room_code: str) -> Room:
    return Room.query.filter_by(code=room_code.upper()).first_or_404()


def _schedule_turn_timer(room: Room) -> None:
    if room.status == 'playing':
        svc_schedule_turn_timer(current_app._get_current_object(), room.id)


@rooms.route('/create', methods=['POST'])
def create_room():
    data = request.get_json(silent=True) or {}
    room, host = lobby.create_room(data.get('name'), data.get('user_id'))
    return jsonify({
        'message': 'New room created!',
        'room_code': room.code,
        'player': host.to_dict(),
    }), 201


@rooms.route('/join', methods=['POST'])
def join_room():
    data = request.get_json(silent=True) or {}
    room_code = data.get('room_code')
    if not room_code or not isinstance(room_code, str):
        return jsonify({'error': 'Room code is required'}), 400

    room = Room.query.filter_by(code=room_code.strip().upper()).first()
    if not room:
        return jsonify({'error': 'Room not found'}), 404

    player, created = lobby.join_room(room, data.get('name'), data.get('user_id'))
    payload = player.to_dict()
    payload['room_code'] = room.code
    return jsonify(payload), 201 if created else 200


@rooms.route('/<string:room_code>/state', methods=['GET'])
def get_room_state(room_code):
    room = _get_room(room_code)
    payload = room.to_dict(viewer_id=request.args.get('user_id'))
    payload['turn_duration'] = int(current_app.config.get('TURN_DURATION_SEC', 60))
    payload['total_rounds'] = int(current_app.config.get('TOTAL_ROUNDS', 0) or 0)
    return jsonify(payload)


@rooms.route('/<string:room_code>/start', methods=['POST'])
def start_game(room_code):
    data = request.get_json(silent=True) or {}
    room = _get_room(room_code)
    turns.start_game(room, data.get('user_id'))
    _schedule_turn_timer(room)
    return jsonify(room.to_dict(viewer_id=data.get('user_id')))


@rooms.route('/<string:room_code>/leave', methods=['POST'])
def leave_room(room_code):
    data = request.get_json(silent=True) or {}
    room = _get_room(room_code)
    remaining = lobby.leave_room(room, data.get('user_id'))
    if remaining is None:
        return jsonify({'message': 'You have left the room.', 'room_closed': True})
    _schedule_turn_timer(remaining)
    return jsonify({'message': 'You have left the room.', 'room_closed': False})


@rooms.route('/<string:room_code>/messages', methods=['GET'])
def get_messages(room_code):
    room = _get_room(room_code)
    after = request.args.get('after', type=int)
    return jsonify([m.to_dict() for m in chat.list_messages(room, after=after)])


@rooms.route('/<string:room_code>/messages', methods=['POST'])
def post_message(room_code):
    data = request.get_json(silent=True) or {}
    room = _get_room(room_code)
    result = guesses.submit_chat(room, data.get('user_id'), data.get('text'))
    if result['correct']:
        _schedule_turn_timer(room)
    return jsonify(result), 201


@rooms.route('/<string:room_code>/canvas', methods=['GET'])
def get_canvas(room_code):
    room = _get_room(room_code)
    return jsonify([p.to_dict() for p in canvas.list_points(room)])


@rooms.route('/<string:room_code>/canvas', methods=['POST'])
def add_point(room_code):
    data = request.get_json(silent=True) or {}
    room = _get_room(room_code)
    point = canvas.add_point(room, data.get('user_id'), data)
    return jsonify(point.to_dict()), 201


@rooms.route('/<string:room_code>/canvas', methods=['DELETE'])
def clear_canvas(room_code):
    data = request.get_json(silent=True) or {}
    room = _get_room(room_code)
    user_id = data.get('user_id') or request.args.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400
    removed = canvas.clear_canvas(room, user_id)
    return jsonify({'removed': removed})


@rooms.route('/<string:room_code>/scoreboard', methods=['GET'])
def get_scoreboard(room_code):
    room = _get_room(room_code)
    board = []
    for p in leaderboard(room):
        entry = p.to_dict()
        entry['is_drawer'] = p.user_id == room.drawer_id
        board.append(entry)
    return jsonify(board)
