from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Protocol, Sequence

from .model import Match

if TYPE_CHECKING:
    from ..controller import AnalysisRequest, RenderUpdate


class DocumentNode(Protocol):
    """
    A node of the host's document tree. The core only reads it.

    `descendants()` yields every node below this one in document order,
    paired with its tree position.
    """

    @property
    def text_content(self) -> str:
        pass

    @property
    def children(self) -> Sequence[DocumentNode]:
        pass

    @property
    def content_size(self) -> int:
        pass

    def is_block_level(self) -> bool:
        pass

    def descendants(self) -> Iterable[tuple[DocumentNode, int]]:
        pass


class PositionMapping(Protocol):
    """
    The tree's own position-remapping function for a committed edit.

    `assoc` picks the side a position sticks to when content is inserted
    exactly at it: -1 stays before, 1 moves after.
    """

    def map(self, pos: int, assoc: int = 1) -> int:
        pass


class AnalysisClient(Protocol):
    def check(self, text: str) -> list[Match]:
        pass


class RenderSink(Protocol):
    """Receives every new annotation snapshot. Must not mutate it."""

    def render(self, update: RenderUpdate) -> None:
        pass


class Dispatcher(Protocol):
    """Sends an analysis request somewhere; the result comes back later."""

    def __call__(self, request: AnalysisRequest) -> None:
        pass
