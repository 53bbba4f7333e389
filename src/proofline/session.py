"""Event loop wiring an analysis client to a SyncController."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Executor, Future
from typing import Any, Callable

from .controller import AnalysisRequest, EditSignal, SyncController
from .core.ports import AnalysisClient, RenderSink
from .core.translate import DEFAULT_POSITION_BASE
from .errors import TransportFailure

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    Runs one document's analysis cycle on a single event queue.

    Edits may be posted from any thread. Each service call runs on its own
    daemon thread (or on `executor`, if given) and its result is queued
    back; only the thread calling `run_pending()` or `run()` ever touches
    the controller. A call that never returns holds only its own thread.
    """

    def __init__(
        self,
        client: AnalysisClient,
        sink: RenderSink | None = None,
        debounce_ms: int = 1000,
        position_base: int = DEFAULT_POSITION_BASE,
        clock: Callable[[], float] = time.monotonic,
        executor: Executor | None = None,
    ):
        self.client = client
        self.events: queue.Queue[Any] = queue.Queue()
        self._executor = executor
        self._closed = False
        self.controller = SyncController(
            self._submit,
            sink=sink,
            debounce_ms=debounce_ms,
            position_base=position_base,
            clock=clock,
        )

    def __enter__(self) -> AnalysisSession:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def open(self, doc: Any) -> None:
        self.controller.load(doc)

    def post(self, signal: EditSignal) -> None:
        """Queue an edit. Safe to call from any thread."""
        self.events.put(signal)

    def run_pending(self, timeout: float | None = None) -> int:
        """
        Process queued events, then let the debounce timer fire if due.

        With a `timeout`, waits that long for the first event. Returns the
        number of events processed.
        """
        processed = 0
        block = timeout is not None and timeout > 0
        while True:
            try:
                item = self.events.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                break
            block = False
            self._process(item)
            processed += 1
        self.controller.poll()
        return processed

    def run(self, stop: threading.Event, interval: float = 0.1) -> None:
        """Process events until `stop` is set."""
        while not stop.is_set():
            self.run_pending(timeout=interval)

    def close(self) -> None:
        """Stop dispatching; calls still running are abandoned."""
        self._closed = True

    def _submit(self, request: AnalysisRequest) -> None:
        if self._closed:
            logger.debug("Session closed, not dispatching version %d", request.version)
            return
        if self._executor is not None:
            future = self._executor.submit(self.client.check, request.text)
        else:
            future = self._spawn(request.text)
        future.add_done_callback(lambda f: self.events.put((request, f)))

    def _spawn(self, text: str) -> Future:
        future: Future = Future()

        def work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.client.check(text))
            except BaseException as e:
                future.set_exception(e)

        threading.Thread(target=work, name="proofline-analysis", daemon=True).start()
        return future

    def _process(self, item: Any) -> None:
        if isinstance(item, EditSignal):
            self.controller.handle(item)
            return
        request, future = item
        self._deliver(request, future)

    def _deliver(self, request: AnalysisRequest, future: Future) -> None:
        try:
            matches = future.result()
        except TransportFailure as e:
            self.controller.fail(request, e)
            return
        except Exception as e:
            logger.exception("Analysis client raised unexpectedly")
            self.controller.fail(request, e)
            return
        self.controller.complete(request, matches)
