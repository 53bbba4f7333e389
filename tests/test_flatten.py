"""Tests for document flattening."""

import pytest

from proofline.adapters.text_document import Blockquote, Doc, Heading, Paragraph, Text, from_text
from proofline.core.flatten import find_blocks, flatten
from proofline.core.model import FlatAnchor
from proofline.errors import InvalidInput


def para(text: str) -> Paragraph:
    return Paragraph(children=(Text(text),) if text else ())


def test_flatten_pads_gap_between_blocks():
    """Two paragraphs two positions apart get two spaces between them."""
    doc = Doc(children=(para("Helo"), para("world")))

    flat_map = flatten(doc)

    assert flat_map.text == "Helo  world"
    assert flat_map.anchors == (FlatAnchor(0, 0), FlatAnchor(6, 6))


def test_flatten_is_deterministic():
    """Flattening the same tree twice gives identical results."""
    doc = from_text("# Title\n\nFirst paragraph.\n\n> quoted\n\nLast one.")

    assert flatten(doc) == flatten(doc)


def test_flatten_missing_root():
    """A missing root is rejected."""
    with pytest.raises(InvalidInput):
        flatten(None)  # type: ignore[arg-type]


def test_flatten_empty_document():
    """An empty document flattens to nothing."""
    flat_map = flatten(Doc())

    assert flat_map.text == ""
    assert flat_map.anchors == ()


def test_flatten_skips_container_blocks():
    """Only leaf blocks are flattened; a blockquote's text is not duplicated."""
    doc = Doc(children=(Blockquote(children=(para("ab"),)), para("cd")))

    blocks = find_blocks(doc)
    flat_map = flatten(doc)

    assert [pos for _node, pos in blocks] == [1, 6]
    assert flat_map.text == "ab   cd"
    assert flat_map.anchors == (FlatAnchor(1, 0), FlatAnchor(6, 5))


def test_flatten_empty_blocks_keep_anchors_increasing():
    """Empty paragraphs still advance both anchor coordinates."""
    doc = Doc(children=(para(""), para(""), para("x")))

    flat_map = flatten(doc)

    assert flat_map.text == "    x"
    offsets = [a.flat_offset for a in flat_map.anchors]
    positions = [a.tree_position for a in flat_map.anchors]
    assert offsets == sorted(set(offsets))
    assert positions == sorted(set(positions))


def test_flat_offsets_match_tree_positions():
    """Every character of the flat text sits at its tree position."""
    doc = Doc(children=(Heading(level=2, children=(Text("Intro"),)), para("Body text"), para("End")))

    flat_map = flatten(doc)

    for node, pos in find_blocks(doc):
        offset = flat_map.tree_to_flat(pos)
        text = node.text_content
        assert flat_map.text[offset:offset + len(text)] == text
        assert flat_map.flat_to_tree(offset) == pos


def test_flat_to_tree_inside_padding():
    """Offsets in the padding still shift by the preceding block's anchor."""
    doc = Doc(children=(Blockquote(children=(para("ab"),)), para("cd")))

    flat_map = flatten(doc)

    assert flat_map.flat_to_tree(3) == 4
    assert flat_map.flat_to_tree(5) == 6
