import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///drawguess.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list of browser origins allowed to talk to the API/socket
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
    ).split(',') if o.strip()]
    # Turn loop (seconds)
    TURN_DURATION_SEC = int(os.environ.get('TURN_DURATION_SEC', '60'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # 0 means keep rotating until the host stops playing
    TOTAL_ROUNDS = int(os.environ.get('TOTAL_ROUNDS', '0'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '8'))
    CORRECT_GUESS_POINTS = int(os.environ.get('CORRECT_GUESS_POINTS', '10'))
    NICKNAME_MAX_LEN = int(os.environ.get('NICKNAME_MAX_LEN', '20'))
    # How long a disconnected player keeps their seat before being removed
    PRESENCE_GRACE_SEC = float(os.environ.get('PRESENCE_GRACE_SEC', '10'))
    # Rooms untouched for this long are removed by `flask purge-rooms`
    ROOM_IDLE_TTL_SEC = int(os.environ.get('ROOM_IDLE_TTL_SEC', str(2 * 60 * 60)))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
