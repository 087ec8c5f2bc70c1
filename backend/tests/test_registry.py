from unittest.mock import MagicMock

from inkthink.models import Room
from inkthink.registry import RoomRegistry
from inkthink.services.games.timer import SocketIOScheduler


def test_get_set_delete():
    registry = RoomRegistry()
    room = Room('r1')
    assert registry.get('r1') is None
    registry.set(room)
    assert registry.get('r1') is room
    assert 'r1' in registry
    assert len(registry) == 1
    registry.delete('r1')
    assert registry.get('r1') is None
    registry.delete('r1')


def test_add_if_absent_keeps_first_room():
    registry = RoomRegistry()
    first, second = Room('r1'), Room('r1')
    assert registry.add_if_absent(first)
    assert not registry.add_if_absent(second)
    assert registry.get('r1') is first


def test_delete_only_removes_matching_instance():
    registry = RoomRegistry()
    old, new = Room('r1'), Room('r1')
    registry.set(new)
    registry.delete('r1', old)
    assert registry.get('r1') is new
    registry.delete('r1', new)
    assert registry.room_ids() == []


class _InlineSocketIO:
    """Runs background tasks immediately and records requested sleeps."""

    def __init__(self):
        self.slept = []

    def sleep(self, seconds):
        self.slept.append(seconds)

    def start_background_task(self, target, *args):
        target(*args)


def test_socketio_scheduler_runs_and_logs_failures():
    sio = _InlineSocketIO()
    logger = MagicMock()
    scheduler = SocketIOScheduler(sio, logger=logger)
    calls = []
    scheduler.call_later(1500, calls.append, 'ran')
    assert calls == ['ran']
    assert sio.slept == [1.5]

    def boom():
        raise RuntimeError('nope')

    scheduler.call_later(0, boom)
    logger.exception.assert_called_once()
