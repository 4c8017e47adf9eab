from drawguess import db
import random
import re
import string
import time

SYSTEM_SENDER_ID = 'system'
SYSTEM_SENDER_NAME = 'SYSTEM'
USER_ID_RE = re.compile(r'^user_[0-9a-z]{9}$')
POINT_TYPES = ('start', 'move', 'end')

_BASE36 = string.digits + string.ascii_lowercase


def _now_ms() -> int:
    return int(time.time() * 1000)


class Player(db.Model):
    __tablename__ = 'player'
    __table_args__ = (db.UniqueConstraint('room_id', 'user_id', name='uq_player_room_user'),)
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(32), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    is_host = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    joined_at = db.Column(db.Float, default=time.time, nullable=False)
    room = db.relationship('Room', back_populates='players')

    def to_dict(self):
        return {
            'id': self.user_id,
            'name': self.name,
            'score': self.score,
            'is_host': self.is_host,
            'is_active': self.is_active,
        }


def generate_room_code(length=6):
    """Generate a unique, short room code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not Room.query.filter_by(code=code).first():
            return code


def generate_user_id():
    return 'user_' + ''.join(random.choices(_BASE36, k=9))


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(6), unique=True, index=True, nullable=False)
    status = db.Column(db.String(16), default='waiting', nullable=False)  # waiting, playing, ended
    drawer_id = db.Column(db.String(32), nullable=True)  # Player.user_id of the current drawer
    current_word = db.Column(db.String(64), nullable=True)
    timer = db.Column(db.Integer, default=0, nullable=False)
    round = db.Column(db.Integer, default=0, nullable=False)
    winner = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.Float, default=time.time, nullable=False)
    updated_at = db.Column(db.Float, default=time.time, onupdate=time.time, nullable=False)
    players = db.relationship('Player', back_populates='room', order_by='Player.id',
                              cascade='all, delete-orphan')
    points = db.relationship('DrawPoint', backref='room', lazy='dynamic',
                             order_by='DrawPoint.id')
    messages = db.relationship('Message', backref='room', lazy='dynamic',
                               order_by='Message.id')

    def __init__(self, **kwargs):
        super(Room, self).__init__(**kwargs)
        if not self.code:
            self.code = generate_room_code()
        if self.status is None:
            self.status = 'waiting'
        if self.timer is None:
            self.timer = 0
        if self.round is None:
            self.round = 0

    def touch(self):
        self.updated_at = time.time()

    def find_player(self, user_id):
        for p in self.players:
            if p.user_id == user_id:
                return p
        return None

    @property
    def host(self):
        return next((p for p in self.players if p.is_host), None)

    @property
    def drawer(self):
        return self.find_player(self.drawer_id) if self.drawer_id else None

    def public_state(self):
        """Room fields every subscriber may see; never includes the word."""
        host = self.host
        return {
            'code': self.code,
            'status': self.status,
            'drawer_id': self.drawer_id,
            'host_id': host.user_id if host else None,
            'timer': self.timer,
            'round': self.round,
            'winner': self.winner,
        }

    def to_dict(self, viewer_id=None):
        from drawguess.services.rooms.scoring import leaderboard
        payload = self.public_state()
        show_word = self.status == 'playing' and viewer_id is not None and viewer_id == self.drawer_id
        payload['current_word'] = self.current_word if show_word else None
        payload['players'] = [p.to_dict() for p in leaderboard(self)]
        return payload


class DrawPoint(db.Model):
    __tablename__ = 'draw_point'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False, index=True)
    type = db.Column(db.String(8), nullable=False)  # start, move, end
    x = db.Column(db.Float, nullable=True)
    y = db.Column(db.Float, nullable=True)
    color = db.Column(db.String(7), nullable=True)
    size = db.Column(db.Integer, nullable=True)

    def to_dict(self):
        if self.type == 'end':
            return {'id': self.id, 'type': 'end'}
        return {
            'id': self.id,
            'type': self.type,
            'x': self.x,
            'y': self.y,
            'color': self.color,
            'size': self.size,
        }


class Message(db.Model):
    __tablename__ = 'message'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False, index=True)
    sender_id = db.Column(db.String(32), nullable=False)
    sender_name = db.Column(db.String(64), nullable=False)
    text = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.BigInteger, default=_now_ms, nullable=False)
    is_system = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'sender_id': self.sender_id,
            'sender_name': self.sender_name,
            'text': self.text,
            'timestamp': self.timestamp,
            'is_system': self.is_system,
        }
