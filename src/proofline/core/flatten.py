"""Flattening a document tree into plain text for the analysis service."""

from __future__ import annotations

from ..errors import InvalidInput
from .model import FlatAnchor, FlatTextMap
from .ports import DocumentNode


def is_leaf_block(node: DocumentNode) -> bool:
    """A block-level node with no block-level children."""
    if not node.is_block_level():
        return False
    return not any(child.is_block_level() for child in node.children)


def find_blocks(root: DocumentNode) -> list[tuple[DocumentNode, int]]:
    """Collect leaf blocks in document order, each with its tree position."""
    if root is None:
        raise InvalidInput('Invalid "root" parameter')
    return [(node, pos) for node, pos in root.descendants() if is_leaf_block(node)]


def flatten(root: DocumentNode) -> FlatTextMap:
    """
    Flatten `root` into a FlatTextMap.

    Between two blocks the flat text gets as many spaces as the tree has
    position units between the end of one block's text and the start of the
    next block, so an offset only ever needs a shift to become a position.
    """
    parts: list[str] = []
    anchors: list[FlatAnchor] = []
    flat_len = 0
    last_end = 0

    for index, (node, pos) in enumerate(find_blocks(root)):
        if index > 0:
            diff = pos - last_end
            if diff > 0:
                parts.append(" " * diff)
                flat_len += diff
        text = node.text_content
        anchors.append(FlatAnchor(tree_position=pos, flat_offset=flat_len))
        parts.append(text)
        flat_len += len(text)
        last_end = pos + len(text)

    return FlatTextMap(text="".join(parts), anchors=tuple(anchors))
