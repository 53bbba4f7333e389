"""Immutable annotation collections."""

from __future__ import annotations

from typing import Iterable, Iterator

from .model import Annotation
from .ports import DocumentNode, PositionMapping


class AnnotationSet:
    """
    Annotations for one document version.

    Never changed in place: `replace_all` and `remap` hand back a new set, so
    a snapshot given to a renderer stays valid.
    """

    __slots__ = ("_items",)

    def __init__(self, annotations: Iterable[Annotation] = ()):
        self._items: tuple[Annotation, ...] = tuple(annotations)

    @classmethod
    def empty(cls) -> AnnotationSet:
        return cls()

    def replace_all(self, annotations: Iterable[Annotation]) -> AnnotationSet:
        return AnnotationSet(annotations)

    def remap(self, mapping: PositionMapping, doc: DocumentNode | None = None) -> AnnotationSet:
        """
        Move every annotation through `mapping`.

        Text typed at either edge stays outside the annotation. Annotations
        that end up empty, or beyond the end of `doc`, are dropped.
        """
        limit = doc.content_size if doc is not None else None
        remapped = []
        for ann in self._items:
            from_pos = mapping.map(ann.from_pos, 1)
            to_pos = mapping.map(ann.to_pos, -1)
            if from_pos >= to_pos:
                continue
            if limit is not None and to_pos > limit:
                continue
            if from_pos == ann.from_pos and to_pos == ann.to_pos:
                remapped.append(ann)
            else:
                remapped.append(ann.moved(from_pos, to_pos))
        return AnnotationSet(remapped)

    def find(self, start: int | None = None, end: int | None = None) -> list[Annotation]:
        """Annotations touching the range [start, end]; all of them by default."""
        if start is None and end is None:
            return list(self._items)
        lo = start if start is not None else end
        hi = end if end is not None else start
        return [a for a in self._items if a.from_pos <= hi and a.to_pos >= lo]

    def get(self, uuid: str) -> Annotation | None:
        for ann in self._items:
            if ann.uuid == uuid:
                return ann
        return None

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnnotationSet):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"AnnotationSet({len(self._items)} annotations)"
