from flask_socketio import join_room, leave_room, emit
from drawguess import socketio
from flask import current_app, request
from drawguess.services.rooms import canvas, guesses, lobby
from drawguess.services.rooms.errors import RoomError
from drawguess.services.rooms.notify import channel
from drawguess.services.rooms.scheduler import schedule_turn_timer
from typing import Dict, Any, Optional
import time


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    # A socket that carried a seated player marks it inactive; the seat is
    # released unless the same player reconnects within the grace period
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    key = _seat_key(ctx)
    if key and _drop_connection(key):
        _seat_lost(*key)


def handle_join_room(data):
    data = data or {}
    room_code = data.get('room_code')
    user_id = data.get('user_id')
    try:
        room = lobby.find_room(room_code)
    except RoomError as exc:
        emit('error', {'message': exc.message})
        return
    room_channel = channel(room.code)
    join_room(room_channel)
    seated = bool(user_id) and room.find_player(user_id) is not None
    sid = _get_sid()
    old_key = _seat_key(_sid_to_ctx.get(sid))
    new_key = (room.code, user_id) if seated else None
    _sid_to_ctx[sid] = {'room_code': room.code, 'user_id': user_id if seated else None}
    # Repeated joins on one socket count once per seat
    if old_key != new_key:
        if new_key:
            _connections[new_key] = _connections.get(new_key, 0) + 1
        if old_key and _drop_connection(old_key):
            _seat_lost(*old_key)
    if new_key:
        _release_deadline.pop(new_key, None)
        lobby.set_presence(room, user_id, True)
    emit('joined', {'room': room_channel, 'state': room.to_dict(viewer_id=user_id)})


def handle_leave_room(data):
    room_code = (data or {}).get('room_code')
    if not room_code:
        emit('error', {'message': 'room_code is required'})
        return
    room_channel = channel(room_code)
    leave_room(room_channel)
    emit('left', {'room': room_channel})


def handle_draw(data):
    data = data or {}
    try:
        room = lobby.find_room(data.get('room_code'))
        canvas.add_point(room, data.get('user_id'), data)
    except RoomError as exc:
        emit('error', {'message': exc.message})


def handle_clear_canvas(data):
    data = data or {}
    try:
        room = lobby.find_room(data.get('room_code'))
        canvas.clear_canvas(room, data.get('user_id') or '')
    except RoomError as exc:
        emit('error', {'message': exc.message})


def handle_chat(data):
    data = data or {}
    try:
        room = lobby.find_room(data.get('room_code'))
        result = guesses.submit_chat(room, data.get('user_id'), data.get('text'))
    except RoomError as exc:
        emit('error', {'message': exc.message})
        return
    if result['correct'] and room.status == 'playing':
        schedule_turn_timer(current_app._get_current_object(), room.id)
    emit('chat_ack', {'correct': result['correct'], 'points': result['points']})


def handle_ping(data):
    emit('pong', data or {})

# ---- Presence helpers ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_connections: Dict[tuple, int] = {}
_release_deadline: Dict[tuple, float] = {}

def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _seat_key(ctx: Optional[Dict[str, Any]]) -> Optional[tuple]:
    if not ctx or not ctx.get('user_id'):
        return None
    return (ctx['room_code'], ctx['user_id'])

def _drop_connection(key: tuple) -> bool:
    """Forget one socket for a seat; True when none are left."""
    count = _connections.get(key, 0) - 1
    if count > 0:
        _connections[key] = count
        return False
    _connections.pop(key, None)
    return True

def _seat_lost(room_code: str, user_id: str) -> None:
    try:
        room = lobby.find_room(room_code)
    except RoomError:
        return
    lobby.set_presence(room, user_id, False)
    if float(current_app.config.get('PRESENCE_GRACE_SEC', 10)) <= 0:
        _release_seat(room_code, user_id)
        return
    _schedule_release(current_app._get_current_object(), room_code, user_id)

def _release_seat(room_code: str, user_id: str) -> None:
    """Remove a player whose sockets are all gone."""
    _release_deadline.pop((room_code, user_id), None)
    try:
        room = lobby.find_room(room_code)
        player = room.find_player(user_id)
        if not player or player.is_active:
            return
        remaining = lobby.leave_room(room, user_id)
    except RoomError:
        return
    if remaining is not None and remaining.status == 'playing':
        schedule_turn_timer(current_app._get_current_object(), remaining.id)

def _schedule_release(app, room_code: str, user_id: str) -> None:
    delay_sec = float(app.config.get('PRESENCE_GRACE_SEC', 10))
    key = (room_code, user_id)
    deadline = time.time() + delay_sec
    _release_deadline[key] = deadline

    def _runner(code: str, uid: str, expected: float):
        sleep_for = max(0.0, expected - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        if _connections.get((code, uid), 0) == 0 and _release_deadline.get((code, uid)) == expected:
            with app.app_context():
                _release_seat(code, uid)

    socketio.start_background_task(_runner, room_code, user_id, deadline)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'join_room': handle_join_room,
        'leave_room': handle_leave_room,
        'draw': handle_draw,
        'clear_canvas': handle_clear_canvas,
        'chat': handle_chat,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
