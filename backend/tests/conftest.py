import os
import sys
import pytest

# Ensure the backend root (containing the `numguess` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from numguess import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    MAX_ACTIVE_GAMES = 3
    HISTORY_DEFAULT_PAGE_SIZE = 10
    HISTORY_MAX_PAGE_SIZE = 100
    LEADERBOARD_MIN_GAMES = 5


class FixedRandom:
    """Stands in for ``random`` so tests choose the secret number."""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.value


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import numguess.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user(flask_app):
    from numguess.models import User

    def _make(username='alice', password='Password1', display_name=None):
        user = User(username=username, display_name=display_name)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def auth_client(flask_app):
    """A test client registered and logged in as 'alice'."""
    test_client = flask_app.test_client()
    res = test_client.post('/register', json={'username': 'alice', 'password': 'Password1'})
    assert res.status_code == 201
    return test_client


@pytest.fixture()
def sio_client(flask_app, auth_client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=auth_client,
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
