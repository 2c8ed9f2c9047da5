import threading
import time

from telemetry_server.realtime.debounce import Debouncer
from telemetry_server.realtime.refresher import PeriodicRefresher


class Recorder:
    def __init__(self):
        self.calls = []
        self.event = threading.Event()

    def __call__(self):
        self.calls.append(time.monotonic())
        self.event.set()


def test_burst_collapses_into_one_call():
    recorder = Recorder()
    debouncer = Debouncer(0.15, recorder)

    for _ in range(3):
        debouncer.trigger()
        last_trigger = time.monotonic()
        time.sleep(0.03)

    assert recorder.event.wait(2.0)
    time.sleep(0.3)
    assert len(recorder.calls) == 1
    assert recorder.calls[0] - last_trigger >= 0.1
    assert not debouncer.pending()


def test_separate_quiet_periods_fire_separately():
    recorder = Recorder()
    debouncer = Debouncer(0.05, recorder)
    debouncer.trigger()
    time.sleep(0.3)
    debouncer.trigger()
    time.sleep(0.3)
    assert len(recorder.calls) == 2


def test_close_cancels_pending_and_ignores_triggers():
    recorder = Recorder()
    debouncer = Debouncer(0.05, recorder)
    debouncer.trigger()
    debouncer.close()
    debouncer.trigger()
    time.sleep(0.2)
    assert recorder.calls == []
    assert not debouncer.pending()


def test_action_errors_are_contained():
    def boom():
        raise RuntimeError("refresh failed")

    debouncer = Debouncer(0.01, boom)
    debouncer.trigger()
    time.sleep(0.1)
    debouncer.trigger()
    time.sleep(0.1)
    assert not debouncer.pending()


def test_periodic_refresher_runs_until_stopped():
    recorder = Recorder()
    refresher = PeriodicRefresher("test-refresh", 0.02, recorder)
    refresher.start()
    deadline = time.monotonic() + 2.0
    while len(recorder.calls) < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    refresher.stop()
    refresher.join(timeout=1.0)

    assert len(recorder.calls) >= 3
    assert not refresher.is_alive()
    count = len(recorder.calls)
    time.sleep(0.1)
    assert len(recorder.calls) == count
