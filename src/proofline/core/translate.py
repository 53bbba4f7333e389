"""Translation between analyzer match spans and tree-position spans."""

from __future__ import annotations

import json
import uuid
from typing import Iterable

from .model import Annotation, FlatTextMap, Match

# A block's text starts one position after the block node itself.
DEFAULT_POSITION_BASE = 1


def match_to_json(match: Match) -> str:
    payload = match.payload or {
        "offset": match.offset,
        "length": match.length,
        "message": match.message,
        "replacements": [{"value": value} for value in match.replacements],
        "rule": {"id": match.id, "issueType": match.category},
    }
    return json.dumps(payload, sort_keys=True)


def translate(
    matches: Iterable[Match],
    flat_map: FlatTextMap,
    position_base: int = DEFAULT_POSITION_BASE,
) -> list[Annotation]:
    """
    Convert matches on the flat text into annotations on the tree.

    Order is preserved and overlapping spans are kept as they are; when they
    overlap, whichever the sink draws last wins.
    """
    annotations = []
    for match in matches:
        from_pos = flat_map.flat_to_tree(match.offset) + position_base
        annotations.append(
            Annotation(
                from_pos=from_pos,
                to_pos=from_pos + match.length,
                category=match.category,
                uuid=str(uuid.uuid4()),
                match_json=match_to_json(match),
            )
        )
    return annotations


def untranslate(
    annotation: Annotation,
    flat_map: FlatTextMap,
    position_base: int = DEFAULT_POSITION_BASE,
) -> tuple[int, int]:
    """Return the (offset, length) on the flat text an annotation covers."""
    offset = flat_map.tree_to_flat(annotation.from_pos - position_base)
    return offset, annotation.to_pos - annotation.from_pos
