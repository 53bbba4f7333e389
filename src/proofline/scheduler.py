"""Debounced scheduling of document analysis."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


class AnalysisScheduler:
    """
    Collapses bursts of edits into one trailing analysis call.

    The timer is plain state: a deadline and the latest document snapshot.
    Whoever owns the event loop calls `poll()` regularly; the call fires once
    the debounce window has passed without another edit.
    """

    def __init__(
        self,
        analyze: Callable[[Any], None],
        debounce_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.analyze = analyze
        self.debounce_ms = debounce_ms
        self.clock = clock

        self.deadline: float | None = None
        self.pending: Any = None
        self.fired = 0

    @property
    def is_pending(self) -> bool:
        return self.deadline is not None

    def start(self, doc: Any) -> None:
        """Analyze the first document right away, skipping the debounce."""
        self.cancel()
        self._fire(doc)

    def on_edit(self, doc: Any) -> None:
        """Supersede any pending call with one for `doc`, restarting the window."""
        if self.deadline is not None:
            logger.debug("Debounce reset, superseding pending analysis")
        self.pending = doc
        self.deadline = self.clock() + self.debounce_ms / 1000

    def poll(self) -> bool:
        """Fire the pending call if its window has elapsed."""
        if self.deadline is None:
            return False
        if self.clock() < self.deadline:
            return False
        self.flush()
        return True

    def flush(self) -> None:
        """Fire the pending call now, if there is one."""
        if self.deadline is None:
            return
        doc = self.pending
        self.cancel()
        self._fire(doc)

    def cancel(self) -> None:
        self.deadline = None
        self.pending = None

    def _fire(self, doc: Any) -> None:
        self.fired += 1
        self.analyze(doc)
