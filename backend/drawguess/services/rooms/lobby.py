import time
from typing import Optional, Tuple

from flask import current_app

from drawguess import db
from drawguess.models import USER_ID_RE, DrawPoint, Message, Player, Room, generate_user_id
from .errors import RoomError
from .turns import next_turn, stop_game
from . import notify


def find_room(room_code) -> Room:
    if not room_code or not isinstance(room_code, str):
        raise RoomError('room_code is required')
    room = Room.query.filter_by(code=room_code.strip().upper()).first()
    if not room:
        raise RoomError('Room not found', 404)
    return room


def _clean_name(name) -> str:
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        raise RoomError('A nickname is required')
    max_len = int(current_app.config.get('NICKNAME_MAX_LEN', 20))
    if len(name) > max_len:
        raise RoomError(f'Nickname must be at most {max_len} characters')
    return name


def _clean_user_id(user_id) -> Optional[str]:
    if user_id is None or user_id == '':
        return None
    if not isinstance(user_id, str) or not USER_ID_RE.match(user_id):
        raise RoomError('user_id must look like user_ followed by 9 lower-case letters or digits')
    return user_id


def create_room(name, user_id: Optional[str] = None) -> Tuple[Room, Player]:
    """Open a new room in the waiting state with its creator as host."""
    user_id = _clean_user_id(user_id)
    name = _clean_name(name)
    room = Room()
    host = Player(user_id=user_id or generate_user_id(), name=name, score=0, is_host=True, is_active=True)
    room.players.append(host)
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[create] room={room.code} host={host.user_id}")
    return room, host


def join_room(room: Room, name, user_id: Optional[str] = None) -> Tuple[Player, bool]:
    """Seat a player in the room; returns (player, created)."""
    user_id = _clean_user_id(user_id)
    existing = room.find_player(user_id) if user_id else None
    if existing:
        existing.is_active = True
        db.session.add(existing)
        db.session.commit()
        notify.players_changed(room)
        return existing, False

    name = _clean_name(name)
    max_players = int(current_app.config.get('MAX_PLAYERS', 8))
    if len(room.players) >= max_players:
        raise RoomError(f'Room is full ({max_players} players)', 403)

    player = Player(
        user_id=user_id or generate_user_id(),
        name=name,
        score=0,
        is_host=not room.players,
        is_active=True,
    )
    room.players.append(player)
    room.touch()
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[join] room={room.code} player={player.user_id} count={len(room.players)}")
    notify.players_changed(room)
    return player, True


def delete_room(room: Room) -> None:
    code = room.code
    DrawPoint.query.filter_by(room_id=room.id).delete(synchronize_session=False)
    Message.query.filter_by(room_id=room.id).delete(synchronize_session=False)
    db.session.delete(room)
    db.session.commit()
    current_app.logger.info(f"[close] room={code}")
    notify.room_closed(code)


def leave_room(room: Room, user_id: str) -> Optional[Room]:
    """Remove a player; returns None when that emptied (and deleted) the room."""
    player = room.find_player(user_id)
    if not player:
        raise RoomError('You are not in this room', 404)

    was_host = player.is_host
    was_drawer = room.drawer_id == player.user_id
    room.players.remove(player)
    db.session.commit()
    current_app.logger.info(f"[leave] room={room.code} player={user_id} remaining={len(room.players)}")

    if not room.players:
        delete_room(room)
        return None

    if was_host:
        successor = room.players[0]
        successor.is_host = True
        db.session.add(successor)
        db.session.commit()
        current_app.logger.info(f"[host] room={room.code} host -> {successor.user_id}")
    notify.players_changed(room)

    if room.status == 'playing':
        min_players = int(current_app.config.get('MIN_PLAYERS', 2))
        if len(room.players) < min_players:
            stop_game(room)
        elif was_drawer:
            next_turn(room)
        else:
            notify.state_changed(room)
    elif was_host:
        notify.state_changed(room)
    return room


def set_presence(room: Room, user_id: str, active: bool) -> Optional[Player]:
    player = room.find_player(user_id)
    if not player:
        return None
    if player.is_active != active:
        player.is_active = active
        db.session.add(player)
        db.session.commit()
        notify.players_changed(room)
    return player


def purge_idle_rooms(max_age_sec: int) -> int:
    cutoff = time.time() - max_age_sec
    stale = Room.query.filter(Room.updated_at < cutoff).all()
    for room in stale:
        delete_room(room)
    return len(stale)
