from inkthink.services.games.timer import RoundTimer


def test_timer_ticks_then_expires(scheduler):
    ticks, expired = [], []
    timer = RoundTimer(scheduler, tick_ms=1000)
    timer.arm(3000, ticks.append, lambda: expired.append(True))
    scheduler.advance(2000)
    assert ticks == [2000, 1000]
    assert expired == []
    scheduler.advance(1000)
    assert expired == [True]
    assert not timer.armed
    scheduler.advance(5000)
    assert ticks == [2000, 1000]
    assert expired == [True]


def test_cancel_is_idempotent_and_drops_late_ticks(scheduler):
    ticks, expired = [], []
    timer = RoundTimer(scheduler, tick_ms=1000)
    generation = timer.arm(2000, ticks.append, lambda: expired.append(True))
    timer.cancel()
    timer.cancel()
    assert timer.generation == generation + 1
    scheduler.advance(10000)
    assert ticks == []
    assert expired == []


def test_stale_generation_tick_is_a_no_op(scheduler):
    ticks = []
    timer = RoundTimer(scheduler, tick_ms=1000)
    first = timer.arm(5000, ticks.append, lambda: None)
    timer.arm(5000, ticks.append, lambda: None)
    # A tick from the first arming arrives late
    timer._tick(first)
    assert ticks == []
    scheduler.advance(1000)
    assert ticks == [4000]


def test_rearm_replaces_previous_countdown(scheduler):
    expired = []
    timer = RoundTimer(scheduler, tick_ms=1000)
    timer.arm(1000, lambda r: None, lambda: expired.append('first'))
    timer.arm(2000, lambda r: None, lambda: expired.append('second'))
    scheduler.advance(3000)
    assert expired == ['second']
