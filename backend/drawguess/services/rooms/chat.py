from typing import List, Optional

from drawguess import db
from drawguess.models import Message, Room, SYSTEM_SENDER_ID, SYSTEM_SENDER_NAME
from . import notify


def post_message(room: Room, sender_id: str, sender_name: str, text: str) -> Message:
    message = Message(room_id=room.id, sender_id=sender_id, sender_name=sender_name, text=text)
    db.session.add(message)
    room.touch()
    db.session.commit()
    notify.message_posted(room, message)
    return message


def post_system_message(room: Room, text: str) -> Message:
    message = Message(
        room_id=room.id,
        sender_id=SYSTEM_SENDER_ID,
        sender_name=SYSTEM_SENDER_NAME,
        text=text,
        is_system=True,
    )
    db.session.add(message)
    db.session.commit()
    notify.message_posted(room, message)
    return message


def list_messages(room: Room, after: Optional[int] = None) -> List[Message]:
    query = Message.query.filter_by(room_id=room.id)
    if after is not None:
        query = query.filter(Message.id > after)
    return query.order_by(Message.id).all()
