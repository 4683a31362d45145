from imposter.services.games.clock import CountdownClock, format_time


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


def snapshot(phase='discussion', elapsed=0.0, duration=300, round_number=1, code='ABC234'):
    return {
        'lobby': {'code': code, 'round_duration': duration, 'current_round': round_number, 'status': 'playing'},
        'round': {'round_number': round_number, 'phase': phase, 'elapsed_seconds': elapsed},
    }


def test_format_time():
    assert format_time(0) == '0:00'
    assert format_time(65) == '1:05'
    assert format_time(300) == '5:00'
    assert format_time(-3) == '0:00'


def test_sync_uses_server_elapsed_time():
    fake = FakeClock()
    clock = CountdownClock(monotonic=fake)
    assert clock.sync(snapshot(elapsed=10.4)) == 289
    assert clock.running


def test_extrapolates_with_local_time_between_polls():
    fake = FakeClock()
    clock = CountdownClock(monotonic=fake)
    clock.sync(snapshot(elapsed=10))
    fake.now += 5.5
    assert clock.remaining() == 284
    fake.now += 1000
    assert clock.remaining() == 0


def test_next_poll_corrects_drift():
    fake = FakeClock()
    clock = CountdownClock(monotonic=fake)
    clock.sync(snapshot(elapsed=10))
    fake.now += 2
    # The server says more time has passed than we extrapolated
    assert clock.sync(snapshot(elapsed=20)) == 280
    fake.now += 1
    assert clock.remaining() == 279


def test_no_countdown_outside_discussion():
    fake = FakeClock()
    clock = CountdownClock(monotonic=fake)
    for phase in ('word_reveal', 'voting', 'results'):
        assert clock.sync(snapshot(phase=phase, elapsed=3)) == 0
        assert clock.remaining() == 0
        assert clock.tick() == []
    assert clock.sync({'lobby': {'code': 'ABC234'}, 'round': None}) == 0


def test_thresholds_fire_once_per_round():
    fake = FakeClock()
    fired = []
    clock = CountdownClock(thresholds=(60, 30, 0), on_threshold=fired.append, monotonic=fake)
    clock.sync(snapshot(duration=90, elapsed=25))
    assert clock.tick() == []
    fake.now += 5
    assert clock.tick() == [60]
    fake.now += 0.1
    assert clock.tick() == []
    # A re-render with a fresh poll does not re-fire
    clock.sync(snapshot(duration=90, elapsed=30.2))
    assert clock.tick() == []
    fake.now += 60
    assert clock.tick() == [30, 0]
    assert fired == [60, 30, 0]


def test_flags_reset_when_round_changes():
    fake = FakeClock()
    fired = []
    clock = CountdownClock(thresholds=(30,), on_threshold=fired.append, monotonic=fake)
    clock.sync(snapshot(duration=30, elapsed=0))
    assert clock.tick() == [30]
    clock.sync(snapshot(phase='voting'))
    clock.sync(snapshot(duration=30, elapsed=0, round_number=2))
    assert clock.tick() == [30]
    assert fired == [30, 30]
