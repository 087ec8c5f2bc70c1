import heapq
import os
import random
import sys
import pytest

# Ensure the backend root (containing the `inkthink` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from inkthink import create_app, socketio
from inkthink.registry import RoomRegistry
from inkthink.services.classifier import DRAWING, Verdict
from inkthink.services.games import CheatDetector, GameEngine, GameRules, Membership
from inkthink.services.games.timer import ScheduledCall


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/ws'
    OPENAI_API_KEY = None


class ManualScheduler:
    """Fake clock: callbacks only run when a test calls ``advance``."""

    def __init__(self):
        self.clock = 0.0
        self._queue = []
        self._seq = 0

    def now(self):
        return self.clock

    def call_later(self, delay_ms, fn, *args):
        call = ScheduledCall()
        self._seq += 1
        heapq.heappush(self._queue, (self.clock + delay_ms, self._seq, call, fn, args))
        return call

    def advance(self, ms):
        target = self.clock + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, call, fn, args = heapq.heappop(self._queue)
            self.clock = due
            if not call.cancelled:
                fn(*args)
        self.clock = target

    def pending(self):
        return sum(1 for entry in self._queue if not entry[2].cancelled)


class RecordingNotifier:

    def __init__(self):
        self.sent = []
        self.closed = []

    def send(self, sid, event, payload):
        self.sent.append(('send', sid, event, payload))

    def broadcast(self, room_id, event, payload, skip_sid=None):
        self.sent.append(('broadcast', room_id, event, payload))

    def error(self, sid, message):
        self.send(sid, 'error', {'message': message})

    def close_room(self, room_id):
        self.closed.append(room_id)

    def events(self, name):
        return [payload for _, _, event, payload in self.sent if event == name]

    def to(self, sid, name):
        return [payload for kind, target, event, payload in self.sent
                if kind == 'send' and target == sid and event == name]

    def clear(self):
        self.sent.clear()


class FakeClassifier:

    def __init__(self, verdict=DRAWING, error=None):
        self.verdict = verdict
        self.error = error
        self.calls = []

    def classify(self, snapshot, expected_word):
        self.calls.append((snapshot, expected_word))
        if self.error is not None:
            raise self.error
        return Verdict(self.verdict, self.verdict)


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def classifier():
    return FakeClassifier()


@pytest.fixture()
def engine(registry, notifier, scheduler):
    return GameEngine(registry, notifier, scheduler, rules=GameRules(), words=['apple'], rng=random.Random(7))


@pytest.fixture()
def membership(engine):
    return Membership(engine)


@pytest.fixture()
def detector(engine, classifier):
    return CheatDetector(engine, classifier)


@pytest.fixture()
def lobby(membership):
    """Room r1 with alice (A), bob (B) and cara (C), in that order."""
    membership.create_room('A', 'r1', 'alice')
    membership.join_room('B', 'r1', 'bob')
    membership.join_room('C', 'r1', 'cara')
    return 'r1'


@pytest.fixture()
def flask_app(scheduler, classifier):
    application = create_app(TestConfig, scheduler=scheduler, classifier=classifier)
    with application.app_context():
        yield application


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
