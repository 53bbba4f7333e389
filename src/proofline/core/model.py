from __future__ import annotations

import json
from bisect import bisect_right
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class FlatAnchor:
    tree_position: int  # position of the block node in the document tree
    flat_offset: int  # where the block's text starts in the flat text


@dataclass(frozen=True)
class FlatTextMap:
    """
    Flattened plain text of a document plus one anchor per leaf block.

    Gaps between blocks are padded with spaces, so within and between blocks
    one tree-position unit is one flat-text character.
    """

    text: str
    anchors: tuple[FlatAnchor, ...] = ()

    def _anchor_for_offset(self, offset: int) -> FlatAnchor | None:
        i = bisect_right([a.flat_offset for a in self.anchors], offset)
        return self.anchors[i - 1] if i else None

    def _anchor_for_position(self, position: int) -> FlatAnchor | None:
        i = bisect_right([a.tree_position for a in self.anchors], position)
        return self.anchors[i - 1] if i else None

    def flat_to_tree(self, offset: int) -> int:
        """Translate a flat-text offset to the tree position it came from."""
        anchor = self._anchor_for_offset(offset) or (self.anchors[0] if self.anchors else None)
        if anchor is None:
            return offset
        return anchor.tree_position + (offset - anchor.flat_offset)

    def tree_to_flat(self, position: int) -> int:
        """Translate a tree position back to its flat-text offset."""
        anchor = self._anchor_for_position(position) or (self.anchors[0] if self.anchors else None)
        if anchor is None:
            return position
        return anchor.flat_offset + (position - anchor.tree_position)


@dataclass(frozen=True)
class Match:
    offset: int  # into the flat text
    length: int
    category: str  # rule.issueType, e.g. "misspelling"
    id: str  # rule.id
    message: str = ""
    replacements: tuple[str, ...] = ()
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class Annotation:
    from_pos: int
    to_pos: int
    category: str
    uuid: str
    match_json: str  # the original match, serialized, for downstream consumers

    @property
    def match(self) -> dict[str, Any]:
        return json.loads(self.match_json)

    def attrs(self) -> dict[str, str]:
        """Attributes for the inline marker the rendering sink draws."""
        return {
            "class": f"lt lt-{self.category}",
            "nodeName": "span",
            "match": self.match_json,
            "uuid": self.uuid,
        }

    def moved(self, from_pos: int, to_pos: int) -> Annotation:
        return replace(self, from_pos=from_pos, to_pos=to_pos)


# Region semantics the host applies to the whole editing surface.
EDITOR_ATTRIBUTES = {"spellcheck": "false"}
