import os
import sys
import pytest

# Ensure the backend root (containing the `wavelength` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from wavelength import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    SCALE_SIZE = 40
    GOAL_ZONE_WIDTH = 5
    MIN_PLAYERS = 2
    MAX_PLAYERS = 8
    CUSTOM_PAIR_LIMIT = 3
    RECENT_PLAYERS_LIMIT = 8


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import wavelength.models  # noqa: F401
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
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def new_session(client):
    """Create a session and join the given player names; returns (code, players)."""
    def _make(*names):
        code = client.post('/api/sessions/create').get_json()['code']
        players = [
            client.post('/api/sessions/join', json={'code': code, 'name': name}).get_json()
            for name in names
        ]
        return code, players
    return _make
