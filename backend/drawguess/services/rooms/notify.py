from drawguess import socketio
from drawguess.models import Room
from .scoring import leaderboard

NAMESPACE = '/ws'


def channel(room_code: str) -> str:
    return f"room:{room_code.upper()}"


def _emit(event: str, room_code: str, payload: dict) -> None:
    payload = dict(payload, room_code=room_code)
    socketio.emit(event, payload, to=channel(room_code), namespace=NAMESPACE)


def state_changed(room: Room) -> None:
    _emit('state_update', room.code, room.public_state())


def players_changed(room: Room) -> None:
    _emit('players_update', room.code, {'players': [p.to_dict() for p in leaderboard(room)]})


def point_added(room: Room, point) -> None:
    _emit('canvas_point', room.code, {'point': point.to_dict()})


def canvas_cleared(room: Room) -> None:
    _emit('canvas_cleared', room.code, {})


def message_posted(room: Room, message) -> None:
    _emit('message', room.code, {'message': message.to_dict()})


def room_closed(room_code: str) -> None:
    _emit('room_closed', room_code, {})
