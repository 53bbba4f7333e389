"""State machine keeping annotations in step with a changing document."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from .core.annotations import AnnotationSet
from .core.flatten import flatten
from .core.model import EDITOR_ATTRIBUTES, FlatTextMap, Match
from .core.ports import Dispatcher, PositionMapping, RenderSink
from .core.translate import DEFAULT_POSITION_BASE, translate
from .errors import InvalidInput, StaleResponse, TransportFailure
from .scheduler import AnalysisScheduler

logger = logging.getLogger(__name__)

# Marks an update that carries fresh analysis results; it must not be remapped.
ANALYSIS_META_KEY = "proofline/analysis"


class SyncState(str, Enum):
    IDLE = "idle"
    EDITED_PENDING = "edited_pending"
    ANALYZING = "analyzing"
    APPLYING_RESULT = "applying_result"


@dataclass(frozen=True)
class EditSignal:
    """A committed change coming from the document's owner."""
    doc: Any
    mapping: PositionMapping | None = None
    doc_changed: bool = True
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalysisRequest:
    """One analysis pass, tagged with the document version it was made for."""
    version: int
    flat_map: FlatTextMap
    doc: Any = field(default=None, compare=False)

    @property
    def text(self) -> str:
        return self.flat_map.text


@dataclass(frozen=True)
class RenderUpdate:
    annotations: AnnotationSet
    version: int
    origin: str  # "load" | "edit" | "analysis"
    meta: dict[str, Any] = field(default_factory=dict)
    attributes: dict[str, str] = field(default_factory=lambda: dict(EDITOR_ATTRIBUTES))


class SyncController:
    """
    Owns the annotation set and the document version for one editing session.

    Every entry point is expected to run on the same thread; nothing here
    locks. Edits remap the current annotations right away and schedule a
    debounced analysis. Results are applied only if the document has not
    changed since their request was dispatched.
    """

    def __init__(
        self,
        dispatch: Dispatcher,
        sink: RenderSink | None = None,
        debounce_ms: int = 1000,
        position_base: int = DEFAULT_POSITION_BASE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._dispatch = dispatch
        self._sink = sink
        self.position_base = position_base
        self._scheduler = AnalysisScheduler(self._analyze, debounce_ms=debounce_ms, clock=clock)

        self._annotations = AnnotationSet.empty()
        self._version = 0
        self._doc: Any = None
        self._state = SyncState.IDLE
        self._in_flight: set[int] = set()

    @property
    def annotations(self) -> AnnotationSet:
        return self._annotations

    @property
    def version(self) -> int:
        return self._version

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def document(self) -> Any:
        return self._doc

    @property
    def scheduler(self) -> AnalysisScheduler:
        return self._scheduler

    def load(self, doc: Any) -> None:
        """Take the first document and analyze it immediately."""
        if doc is None:
            raise InvalidInput('Invalid "doc" parameter')
        if self._doc is not None:
            self._version += 1
        self._doc = doc
        self._annotations = AnnotationSet.empty()
        self._emit("load")
        self._scheduler.start(doc)

    def handle(self, signal: EditSignal) -> AnnotationSet:
        """Apply an inbound document signal and return the resulting set."""
        if signal.meta.get(ANALYSIS_META_KEY):
            return self._annotations
        if not signal.doc_changed:
            return self._annotations
        if signal.mapping is None:
            raise InvalidInput("A document change needs a position mapping")

        self._version += 1
        self._doc = signal.doc
        self._annotations = self._annotations.remap(signal.mapping, signal.doc)
        self._scheduler.on_edit(signal.doc)
        self._settle()
        self._emit("edit")
        return self._annotations

    def poll(self) -> bool:
        """Dispatch the debounced analysis if its window has elapsed."""
        return self._scheduler.poll()

    def flush(self) -> None:
        """Dispatch a pending debounced analysis without waiting."""
        self._scheduler.flush()

    def complete(self, request: AnalysisRequest, matches: Iterable[Match]) -> bool:
        """
        Apply the service's answer to `request`.

        Returns False if the answer was stale and dropped.
        """
        self._in_flight.discard(request.version)
        if request.version != self._version:
            logger.debug("Discarding analysis result: %s", StaleResponse(request.version, self._version))
            self._settle()
            return False

        self._state = SyncState.APPLYING_RESULT
        annotations = translate(matches, request.flat_map, self.position_base)
        self._annotations = self._annotations.replace_all(annotations)
        self._settle()
        logger.debug("Applied %d annotations for version %d", len(annotations), request.version)
        self._emit("analysis", {ANALYSIS_META_KEY: True})
        return True

    def fail(self, request: AnalysisRequest, error: Exception) -> None:
        """Record a failed analysis; annotations keep their last good state."""
        self._in_flight.discard(request.version)
        if request.version != self._version:
            logger.debug("Ignoring failure of stale analysis (version %d): %s", request.version, error)
        else:
            logger.warning("Analysis of version %d failed: %s", request.version, error)
        self._settle()

    def _analyze(self, doc: Any) -> None:
        flat_map = flatten(doc)
        request = AnalysisRequest(version=self._version, flat_map=flat_map, doc=doc)
        self._in_flight.add(request.version)
        self._state = SyncState.ANALYZING
        logger.debug("Dispatching analysis for version %d (%d chars)", request.version, len(request.text))
        try:
            self._dispatch(request)
        except TransportFailure as e:
            self.fail(request, e)

    def _settle(self) -> None:
        if self._in_flight:
            self._state = SyncState.ANALYZING
        elif self._scheduler.is_pending:
            self._state = SyncState.EDITED_PENDING
        else:
            self._state = SyncState.IDLE

    def _emit(self, origin: str, meta: dict[str, Any] | None = None) -> None:
        if self._sink is None:
            return
        self._sink.render(
            RenderUpdate(
                annotations=self._annotations,
                version=self._version,
                origin=origin,
                meta=dict(meta or {}),
                attributes=dict(EDITOR_ATTRIBUTES),
            )
        )
