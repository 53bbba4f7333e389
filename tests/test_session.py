"""Tests for the AnalysisSession event loop."""

import threading
import time
from concurrent.futures import Executor, Future

import httpx

from proofline.adapters.languagetool import LanguageToolClient
from proofline.adapters.text_document import diff_documents, from_text
from proofline.controller import EditSignal, SyncState
from proofline.core.model import Match
from proofline.errors import TransportFailure
from proofline.session import AnalysisSession


class InlineExecutor(Executor):
    """Runs submitted work on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class ScriptedClient:
    """Returns matches for texts it knows and records every call."""

    def __init__(self, answers=None, error=None):
        self.answers = answers or {}
        self.error = error
        self.calls = []

    def check(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.answers.get(text, [])


HELO = Match(offset=0, length=4, category="misspelling", id="MORFOLOGIK_RULE_EN_US")


def test_session_applies_first_analysis(sink, clock):
    """Opening a document analyzes it and applies the queued result."""
    client = ScriptedClient({"Helo world": [HELO]})
    session = AnalysisSession(client, sink=sink, clock=clock, executor=InlineExecutor())

    session.open(from_text("Helo world"))
    assert session.controller.state is SyncState.ANALYZING

    session.run_pending()

    assert client.calls == ["Helo world"]
    assert [(a.from_pos, a.to_pos) for a in session.controller.annotations] == [(1, 5)]
    assert session.controller.state is SyncState.IDLE


def test_session_edit_then_reanalysis(sink, clock):
    """Posted edits are remapped on the loop and re-analyzed after the window."""
    client = ScriptedClient({"Helo world": [HELO], "Helo wurld": [HELO, Match(5, 5, "misspelling", "M")]})
    session = AnalysisSession(client, sink=sink, debounce_ms=500, clock=clock, executor=InlineExecutor())
    doc0 = from_text("Helo world")
    session.open(doc0)
    session.run_pending()

    doc1 = from_text("Helo wurld")
    session.post(EditSignal(doc=doc1, mapping=diff_documents(doc0, doc1)))
    assert session.run_pending() == 1
    assert session.controller.state is SyncState.EDITED_PENDING
    assert len(client.calls) == 1

    clock.advance(600)
    session.run_pending()
    session.run_pending()

    assert client.calls[-1] == "Helo wurld"
    assert len(session.controller.annotations) == 2
    assert session.controller.state is SyncState.IDLE


def test_session_routes_failures(sink, clock):
    """A failing client leaves the annotation set untouched."""
    client = ScriptedClient(error=TransportFailure("LanguageTool returned HTTP 503"))
    session = AnalysisSession(client, sink=sink, clock=clock, executor=InlineExecutor())

    session.open(from_text("Helo world"))
    session.run_pending()

    assert len(session.controller.annotations) == 0
    assert session.controller.state is SyncState.IDLE


class BlockingClient:
    """Hangs on every text except the ones it is told to answer."""

    def __init__(self, answered):
        self.answered = answered
        self.release = threading.Event()
        self.calls = []

    def check(self, text):
        self.calls.append(text)
        if text not in self.answered:
            self.release.wait()
        return []


def test_hung_calls_do_not_block_new_analysis():
    """Two requests that never return do not hold back the next edit's analysis."""
    client = BlockingClient({"three"})
    session = AnalysisSession(client, debounce_ms=0)
    doc0 = from_text("one")
    doc1 = from_text("two")
    doc2 = from_text("three")
    try:
        session.open(doc0)
        session.post(EditSignal(doc=doc1, mapping=diff_documents(doc0, doc1)))
        session.run_pending()
        session.post(EditSignal(doc=doc2, mapping=diff_documents(doc1, doc2)))

        deadline = time.monotonic() + 5
        while "three" not in client.calls and time.monotonic() < deadline:
            session.run_pending(timeout=0.05)

        assert "three" in client.calls
        assert session.controller.version == 2
    finally:
        client.release.set()
        session.close()


def test_closed_session_stops_dispatching(clock):
    client = ScriptedClient()
    session = AnalysisSession(client, clock=clock, executor=InlineExecutor())
    session.close()

    session.open(from_text("Helo world"))
    session.run_pending()

    assert client.calls == []


def test_session_with_worker_threads():
    """End to end through real worker threads and a mocked LanguageTool."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"matches": [{"offset": 0, "length": 4, "rule": {"id": "R", "issueType": "misspelling"}}]},
        )

    client = LanguageToolClient(
        "http://lt.test/v2/", http_client=httpx.Client(transport=httpx.MockTransport(handler))
    )
    with AnalysisSession(client) as session:
        session.open(from_text("Helo world"))
        for _ in range(50):
            session.run_pending(timeout=0.1)
            if session.controller.state is SyncState.IDLE:
                break

        assert session.controller.state is SyncState.IDLE
        assert [(a.from_pos, a.to_pos) for a in session.controller.annotations] == [(1, 5)]
