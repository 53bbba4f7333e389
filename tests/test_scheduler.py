"""Tests for the debounced analysis scheduler."""

from proofline.scheduler import AnalysisScheduler


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000


def make_scheduler(debounce_ms: int = 1000):
    calls = []
    clock = FakeClock()
    scheduler = AnalysisScheduler(calls.append, debounce_ms=debounce_ms, clock=clock)
    return scheduler, calls, clock


def test_start_fires_immediately():
    """The first document is analyzed without waiting, whatever the window."""
    scheduler, calls, _clock = make_scheduler(debounce_ms=60_000)

    scheduler.start("doc-0")

    assert calls == ["doc-0"]
    assert not scheduler.is_pending


def test_edit_waits_for_window():
    """An edit fires only once the debounce window has elapsed."""
    scheduler, calls, clock = make_scheduler()

    scheduler.on_edit("doc-1")
    clock.advance(999)
    assert scheduler.poll() is False
    assert calls == []

    clock.advance(2)
    assert scheduler.poll() is True
    assert calls == ["doc-1"]
    assert scheduler.poll() is False


def test_burst_collapses_to_last_snapshot():
    """N edits inside one window produce one call with the last document."""
    scheduler, calls, clock = make_scheduler()

    for i in range(5):
        scheduler.on_edit(f"doc-{i}")
        clock.advance(200)
        scheduler.poll()

    assert calls == []
    clock.advance(1000)
    scheduler.poll()

    assert calls == ["doc-4"]
    assert scheduler.fired == 1


def test_edit_resets_window():
    """Each edit restarts the quiet period."""
    scheduler, calls, clock = make_scheduler(debounce_ms=100)

    scheduler.on_edit("a")
    clock.advance(90)
    scheduler.on_edit("b")
    clock.advance(90)
    scheduler.poll()
    assert calls == []

    clock.advance(20)
    scheduler.poll()
    assert calls == ["b"]


def test_flush_and_cancel():
    """flush() fires a pending call now; cancel() drops it."""
    scheduler, calls, _clock = make_scheduler()

    scheduler.on_edit("x")
    scheduler.flush()
    assert calls == ["x"]

    scheduler.on_edit("y")
    scheduler.cancel()
    scheduler.flush()
    assert calls == ["x"]
    assert not scheduler.is_pending


def test_start_supersedes_pending_edit():
    """A fresh start replaces a pending debounced call."""
    scheduler, calls, clock = make_scheduler()

    scheduler.on_edit("old")
    scheduler.start("new")
    clock.advance(5000)
    scheduler.poll()

    assert calls == ["new"]
