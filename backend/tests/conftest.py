import os
import sys
import pytest

# Ensure the backend root (containing the `drawguess` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from drawguess import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    TURN_DURATION_SEC = 60
    TICK_INTERVAL_SEC = 0
    TOTAL_ROUNDS = 0
    MIN_PLAYERS = 2
    MAX_PLAYERS = 4
    CORRECT_GUESS_POINTS = 10
    NICKNAME_MAX_LEN = 20
    PRESENCE_GRACE_SEC = 0


@pytest.fixture(autouse=True)
def fixed_word(monkeypatch):
    """Every turn draws the word 'apple'."""
    monkeypatch.setattr('drawguess.services.rooms.turns.pick_word', lambda rng=None: 'apple')
    return 'apple'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import drawguess.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def room(client):
    """A waiting room hosted by Alice with Bob and Cara seated."""
    res = client.post('/api/rooms/create', json={'name': 'Alice', 'user_id': 'user_alice0001'})
    code = res.get_json()['room_code']
    client.post('/api/rooms/join', json={'room_code': code, 'name': 'Bob', 'user_id': 'user_bob000001'})
    client.post('/api/rooms/join', json={'room_code': code, 'name': 'Cara', 'user_id': 'user_cara00001'})
    return code
