import os
import sys
import pytest

# Ensure the backend root (containing the `tally` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tally import create_app, db, socketio
from tally.realtime import Broadcaster


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ROOM_TTL_HOURS = 24
    ROOM_CODE_ATTEMPTS = 20
    SWEEP_INTERVAL_SEC = 3600
    SOCKETIO_NAMESPACE = '/'
    CORS_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'


class RecordingBroadcaster(Broadcaster):
    """Keeps every broadcast in ``events`` and still emits it."""

    def __init__(self):
        super().__init__()
        self.events = []

    def broadcast(self, code, event, payload):
        self.events.append((code, event, payload))
        super().broadcast(code, event, payload)

    def named(self, event):
        return [e for e in self.events if e[1] == event]


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def flask_app(broadcaster):
    application = create_app(TestConfig, broadcaster=broadcaster)
    with application.app_context():
        # Ensure models are imported so tables are created
        import tally.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


@pytest.fixture()
def make_room(client):
    """Create a room over HTTP, optionally with participants."""
    def _make(*names):
        room = client.post('/api/rooms').get_json()
        participants = [
            client.post(f"/api/rooms/{room['code']}/participants", json={'name': n}).get_json()
            for n in names
        ]
        return room, participants
    return _make
