"""
Minimal document tree for driving proofline from plain text files.

Positions follow the usual rich-text editor convention: the root has no
tokens of its own, every block node takes one position for its opening and
one for its closing, and every character of text takes one position.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Sequence

_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$", re.DOTALL)


class _NodeOps:
    kind = "node"

    @property
    def children(self) -> Sequence[_NodeOps]:
        return ()

    def is_block_level(self) -> bool:
        return True

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.children)

    @property
    def content_size(self) -> int:
        return sum(child.node_size for child in self.children)

    @property
    def node_size(self) -> int:
        return self.content_size + 2

    def descendants(self, start: int = 0) -> Iterator[tuple[_NodeOps, int]]:
        """Every node below this one, with its position; `start` is where our content begins."""
        pos = start
        for child in self.children:
            yield child, pos
            yield from child.descendants(pos + 1)
            pos += child.node_size

    def tokens(self) -> list[str]:
        """One token per position unit, used to diff two versions of a tree."""
        out = [f"<{self.kind}"]
        for child in self.children:
            out.extend(child.tokens())
        out.append(f"</{self.kind}")
        return out


@dataclass(frozen=True)
class Text(_NodeOps):
    text: str
    kind = "text"

    def is_block_level(self) -> bool:
        return False

    @property
    def text_content(self) -> str:
        return self.text

    @property
    def node_size(self) -> int:
        return len(self.text)

    def tokens(self) -> list[str]:
        return list(self.text)


@dataclass(frozen=True)
class Paragraph(_NodeOps):
    children: tuple[Text, ...] = ()
    kind = "paragraph"


@dataclass(frozen=True)
class Heading(_NodeOps):
    level: int = 1
    children: tuple[Text, ...] = ()

    @property
    def kind(self) -> str:  # type: ignore[override]
        return f"h{self.level}"


@dataclass(frozen=True)
class Blockquote(_NodeOps):
    children: tuple[_NodeOps, ...] = ()
    kind = "blockquote"


@dataclass(frozen=True)
class Doc(_NodeOps):
    children: tuple[_NodeOps, ...] = ()
    kind = "doc"

    @property
    def node_size(self) -> int:
        return self.content_size

    def tokens(self) -> list[str]:
        out: list[str] = []
        for child in self.children:
            out.extend(child.tokens())
        return out


def _inline(text: str) -> tuple[Text, ...]:
    text = " ".join(line.strip() for line in text.splitlines())
    return (Text(text),) if text else ()


def from_text(source: str) -> Doc:
    """
    Build a Doc from blank-line separated chunks of text.

    ``# Title`` chunks become headings, chunks whose lines all start with
    ``>`` become a blockquote holding one paragraph, everything else is a
    paragraph. Line breaks inside a chunk become spaces.
    """
    blocks: list[_NodeOps] = []
    for chunk in _BLANK_LINE_RE.split(source.replace("\r\n", "\n")):
        chunk = chunk.strip("\n")
        if not chunk.strip():
            continue
        heading = _HEADING_RE.match(chunk)
        lines = chunk.splitlines()
        if heading:
            blocks.append(Heading(level=len(heading.group(1)), children=_inline(heading.group(2))))
        elif all(line.lstrip().startswith(">") for line in lines):
            inner = "\n".join(line.lstrip()[1:] for line in lines)
            blocks.append(Blockquote(children=(Paragraph(children=_inline(inner)),)))
        else:
            blocks.append(Paragraph(children=_inline(chunk)))
    return Doc(children=tuple(blocks))


@dataclass(frozen=True)
class StepMap:
    """
    Position map for one edit: ``(start, old_size, new_size)`` ranges in
    old-document coordinates, sorted and non-overlapping.
    """

    ranges: tuple[tuple[int, int, int], ...] = ()

    def map(self, pos: int, assoc: int = 1) -> int:
        diff = 0
        for start, old_size, new_size in self.ranges:
            if start > pos:
                break
            end = start + old_size
            if pos <= end:
                if not old_size:
                    side = assoc
                elif pos == start:
                    side = -1
                elif pos == end:
                    side = 1
                else:
                    side = assoc
                return start + diff + (0 if side < 0 else new_size)
            diff += new_size - old_size
        return pos + diff


IDENTITY = StepMap()


@dataclass(frozen=True)
class Mapping:
    """A sequence of step maps applied in order."""

    maps: tuple[StepMap, ...] = ()

    def map(self, pos: int, assoc: int = 1) -> int:
        for step in self.maps:
            pos = step.map(pos, assoc)
        return pos

    def then(self, step: StepMap) -> Mapping:
        return Mapping(self.maps + (step,))


def diff_documents(old: _NodeOps, new: _NodeOps) -> StepMap:
    """Describe the change from `old` to `new` as one replaced range."""
    a, b = old.tokens(), new.tokens()
    limit = min(len(a), len(b))

    prefix = 0
    while prefix < limit and a[prefix] == b[prefix]:
        prefix += 1

    suffix = 0
    while suffix < limit - prefix and a[-1 - suffix] == b[-1 - suffix]:
        suffix += 1

    old_size = len(a) - prefix - suffix
    new_size = len(b) - prefix - suffix
    if old_size == 0 and new_size == 0:
        return IDENTITY
    return StepMap(((prefix, old_size, new_size),))
