"""Utilities for describing annotations by block and column."""

from bisect import bisect_right
from typing import Any

from .core.model import Annotation, FlatTextMap
from .core.translate import DEFAULT_POSITION_BASE, untranslate


def offset_to_block_col(flat_map: FlatTextMap, offset: int) -> tuple[int, int]:
    """
    Convert a flat-text offset to block number and column (both 1-based).

    Offsets inside the padding between two blocks count as columns past the
    end of the earlier block.
    """
    starts = [a.flat_offset for a in flat_map.anchors]
    index = bisect_right(starts, offset)
    if index == 0:
        return 1, offset + 1
    return index, offset - starts[index - 1] + 1


def locate_annotation(
    annotation: Annotation,
    flat_map: FlatTextMap,
    position_base: int = DEFAULT_POSITION_BASE,
) -> dict[str, Any]:
    """
    Describe where an annotation sits in the flattened text.

    Returns a JSON-ready dict with the tree span, flat span, 1-based
    block/column, the covered text and the match's message and suggestions.
    """
    offset, length = untranslate(annotation, flat_map, position_base)
    block, column = offset_to_block_col(flat_map, offset)
    match = annotation.match
    return {
        "uuid": annotation.uuid,
        "from": annotation.from_pos,
        "to": annotation.to_pos,
        "offset": offset,
        "length": length,
        "block": block,
        "column": column,
        "text": flat_map.text[offset:offset + length],
        "category": annotation.category,
        "rule": (match.get("rule") or {}).get("id", ""),
        "message": match.get("message", ""),
        "replacements": [
            r["value"] for r in match.get("replacements") or [] if isinstance(r, dict) and "value" in r
        ],
    }


def format_location(info: dict[str, Any]) -> str:
    """One human-readable line for a located annotation."""
    out = f"{info['block']}:{info['column']}  [{info['category']}] \"{info['text']}\""
    if info["message"]:
        out += f"  {info['message']}"
    if info["replacements"]:
        out += f"  -> {', '.join(info['replacements'][:3])}"
    return out
