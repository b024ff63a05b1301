import os
import sys
import pytest

# Ensure the backend root (containing the `voicerelay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from voicerelay import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DEFAULT_GAME_CODE = 'MAIN'
    CORS_ORIGINS = ['http://localhost:5173']
    UPLOAD_DIR = None


@pytest.fixture()
def upload_dir(tmp_path):
    path = tmp_path / 'uploads'
    path.mkdir()
    return path


@pytest.fixture()
def flask_app(upload_dir):
    config = type('PerTestConfig', (TestConfig,), {'UPLOAD_DIR': str(upload_dir)})
    application = create_app(config)
    with application.app_context():
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
def clock(monkeypatch):
    """Pin the gateway clock; set ``clock.now`` (epoch ms) to move time."""
    import voicerelay.api.relay as relay_api

    class _Clock:
        now = 0

    fake = _Clock()
    monkeypatch.setattr(relay_api, '_now_ms', lambda: fake.now)
    return fake


@pytest.fixture()
def threaded_app(tmp_path, upload_dir):
    """App on a file database so concurrent requests get their own connections."""
    config = type('ThreadedConfig', (TestConfig,), {
        'UPLOAD_DIR': str(upload_dir),
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///' + str(tmp_path / 'relay.db'),
    })
    application = create_app(config)
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
