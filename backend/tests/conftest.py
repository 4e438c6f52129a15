import os
import sys
import pytest

# Ensure the backend root (containing the `skirmish` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from skirmish import create_app, socketio
from skirmish.services.games import GameEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    LOG_LEVEL = 'DEBUG'
    GAME_CODE_LENGTH = 6


class RecordingBroadcaster:
    """Stands in for the transport: keeps every (recipients, snapshot) pushed."""

    def __init__(self):
        self.calls = []

    def __call__(self, recipients, snapshot):
        self.calls.append((list(recipients), snapshot))

    @property
    def last(self):
        return self.calls[-1][1] if self.calls else None


def assert_grid_consistent(engine):
    """Every occupied cell holds exactly the live unit positioned there."""
    positions = {}
    for unit in engine.units.values():
        assert (unit.x, unit.y) not in positions
        positions[(unit.x, unit.y)] = unit.id
    for y, row in enumerate(engine.grid):
        for x, cell in enumerate(row):
            assert cell.unit_id == positions.get((x, y))


@pytest.fixture()
def recorder():
    return RecordingBroadcaster()


@pytest.fixture()
def engine(recorder):
    """A game with both players seated; the host is to act with 12 energy."""
    game = GameEngine('GAME01', 'host', broadcast=recorder)
    game.add_player('host')
    game.add_player('guest')
    return game


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
