from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from drawguess.main import main
    flask_app.register_blueprint(main)

    from drawguess.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers on the initialized socketio instance
    from drawguess.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates every table."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    @click.command('purge-rooms')
    @click.option('--max-age', type=int, default=None,
                  help='Seconds since last activity (defaults to ROOM_IDLE_TTL_SEC).')
    def purge_rooms_command(max_age):
        """Deletes rooms nobody has touched for a while."""
        from drawguess.services.rooms.lobby import purge_idle_rooms
        with flask_app.app_context():
            ttl = max_age if max_age is not None else int(flask_app.config.get('ROOM_IDLE_TTL_SEC', 7200))
            removed = purge_idle_rooms(ttl)
            click.echo(f'Removed {removed} idle room(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(purge_rooms_command)

    return flask_app
