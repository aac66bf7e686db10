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


def create_app(config_class=Config, broadcaster=None):
    """Build the Flask app.

    ``broadcaster`` replaces the default :class:`tally.realtime.Broadcaster`,
    which lets tests record events instead of emitting them.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from tally.realtime import Broadcaster
    if broadcaster is None:
        broadcaster = Broadcaster()
    broadcaster.init_app(flask_app, socketio)

    from tally.services.sweeper import ExpirySweeper
    ExpirySweeper().init_app(flask_app)

    from tally.routes import main
    flask_app.register_blueprint(main)

    # Mounted under /api to match the frontend API client
    from tally.api.rooms import rooms
    from tally.api.games import games, scores
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')
    flask_app.register_blueprint(games, url_prefix='/api/games')
    flask_app.register_blueprint(scores, url_prefix='/api/scores')

    from tally.errors import register_error_handlers
    register_error_handlers(flask_app)

    from tally.socketio_events import register_socketio_handlers
    register_socketio_handlers(flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates all tables."""
        import tally.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    @click.command('sweep-rooms')
    def sweep_rooms_command():
        """Deactivates every room past its expiry time."""
        with flask_app.app_context():
            count = flask_app.extensions['sweeper'].sweep()
            click.echo(f'Deactivated {count} expired room(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(sweep_rooms_command)

    return flask_app
