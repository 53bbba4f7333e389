"""Shared fixtures."""

import pytest


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000


class RecordingSink:
    def __init__(self) -> None:
        self.updates = []

    def render(self, update) -> None:
        self.updates.append(update)

    @property
    def last(self):
        return self.updates[-1]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sink():
    return RecordingSink()
