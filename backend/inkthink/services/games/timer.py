import time
import threading
from typing import Callable, Optional


class ScheduledCall:
    """Handle for a delayed callback. Cancelling is idempotent."""

    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Delayed callbacks on Socket.IO background tasks.

    Uses ``socketio.sleep`` so the delay cooperates with whichever async mode
    (threading, eventlet, gevent) the server runs under.
    """

    def __init__(self, socketio, logger=None):
        self.socketio = socketio
        self.logger = logger

    def now(self) -> float:
        return time.monotonic() * 1000.0

    def call_later(self, delay_ms: float, fn: Callable, *args) -> ScheduledCall:
        call = ScheduledCall()

        def _runner():
            self.socketio.sleep(max(0.0, delay_ms) / 1000.0)
            if call.cancelled:
                return
            try:
                fn(*args)
            except Exception:
                if self.logger is not None:
                    self.logger.exception(f"[task-error] callback={getattr(fn, '__name__', fn)}")

        self.socketio.start_background_task(_runner)
        return call


class RoundTimer:
    """Repeating per-room countdown.

    Every ``arm`` starts a new generation; ``cancel`` bumps it too. A tick
    only runs if it still carries the current generation, so a tick that was
    already in flight when the round ended is dropped.
    """

    def __init__(self, scheduler, tick_ms: int = 1000, lock=None):
        self.scheduler = scheduler
        self.tick_ms = tick_ms
        self.lock = lock or threading.RLock()
        self.generation = 0
        self.remaining_ms = 0
        self._handle: Optional[ScheduledCall] = None
        self._on_tick: Optional[Callable[[int], None]] = None
        self._on_expire: Optional[Callable[[], None]] = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self, duration_ms: int, on_tick: Callable[[int], None], on_expire: Callable[[], None]) -> int:
        with self.lock:
            self.cancel()
            self.generation += 1
            self.remaining_ms = duration_ms
            self._on_tick = on_tick
            self._on_expire = on_expire
            self._schedule(self.generation)
            return self.generation

    def cancel(self) -> None:
        with self.lock:
            if self._handle is None:
                return
            self._handle.cancel()
            self._handle = None
            self.generation += 1

    def _schedule(self, generation: int) -> None:
        self._handle = self.scheduler.call_later(self.tick_ms, self._tick, generation)

    def _tick(self, generation: int) -> None:
        with self.lock:
            if generation != self.generation or self._handle is None:
                return
            self.remaining_ms -= self.tick_ms
            if self.remaining_ms <= 0:
                on_expire = self._on_expire
                self.cancel()
                on_expire()
                return
            self._schedule(generation)
            self._on_tick(self.remaining_ms)
