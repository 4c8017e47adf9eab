import re
from typing import List, Optional

from drawguess import db
from drawguess.models import DrawPoint, Room, POINT_TYPES
from .errors import RoomError
from . import notify

COLOR_RE = re.compile(r'^#[0-9a-fA-F]{6}$')
MIN_BRUSH_SIZE = 1
MAX_BRUSH_SIZE = 20


def _parse_point(data: dict) -> DrawPoint:
    kind = data.get('type')
    if kind not in POINT_TYPES:
        raise RoomError(f"Point type must be one of {', '.join(POINT_TYPES)}")
    if kind == 'end':
        return DrawPoint(type='end')

    try:
        x = float(data.get('x'))
        y = float(data.get('y'))
    except (TypeError, ValueError):
        raise RoomError('Point needs numeric x and y')
    color = data.get('color')
    if not isinstance(color, str) or not COLOR_RE.match(color):
        raise RoomError('Color must look like #rrggbb')
    try:
        size = int(data.get('size'))
    except (TypeError, ValueError):
        raise RoomError('Brush size must be an integer')
    if not MIN_BRUSH_SIZE <= size <= MAX_BRUSH_SIZE:
        raise RoomError(f'Brush size must be between {MIN_BRUSH_SIZE} and {MAX_BRUSH_SIZE}')
    return DrawPoint(type=kind, x=x, y=y, color=color.lower(), size=size)


def add_point(room: Room, user_id: str, data: dict) -> DrawPoint:
    if room.status != 'playing':
        raise RoomError('Drawing is only possible during a turn', 409)
    if not user_id or user_id != room.drawer_id:
        raise RoomError('Only the drawer may draw', 403)
    point = _parse_point(data or {})
    point.room_id = room.id
    db.session.add(point)
    room.touch()
    db.session.commit()
    notify.point_added(room, point)
    return point


def clear_canvas(room: Room, user_id: Optional[str] = None) -> int:
    """Drop every point of the room; named users must be the drawer."""
    if user_id is not None and user_id != room.drawer_id:
        raise RoomError('Only the drawer may clear the canvas', 403)
    removed = DrawPoint.query.filter_by(room_id=room.id).delete(synchronize_session=False)
    db.session.commit()
    notify.canvas_cleared(room)
    return removed


def list_points(room: Room) -> List[DrawPoint]:
    return DrawPoint.query.filter_by(room_id=room.id).order_by(DrawPoint.id).all()
