"""
Location Codec

Converts between a live selection in a rendered chapter and a portable
``Location`` (verse anchor id plus character offsets). The tree side is a thin
adapter: it flattens a verse into its text nodes and hands the lengths to
``text_runs``, which owns all offset arithmetic.

Only text nodes carry characters. Inline markup (emphasis, word spans,
overlay wrappers, note markers) adds none, so a location stays valid however
the same text is wrapped.
"""

from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .text_runs import decode_offsets, encode_offsets

ANCHOR_TAG = "p"
ANCHOR_ID_PREFIX = "verse-"


@dataclass(frozen=True)
class Location:
    anchorId: str
    start: int
    end: int


@dataclass
class TextPoint:
    """A boundary point: a text node and an offset inside it"""

    node: NavigableString
    offset: int


@dataclass
class TextRange:
    start: TextPoint
    end: TextPoint

    @property
    def collapsed(self) -> bool:
        return self.start.node is self.end.node and self.start.offset == self.end.offset


def is_text_node(node) -> bool:
    # Comments, CDATA and doctypes are strings too but are never displayed
    return isinstance(node, NavigableString) and not isinstance(
        node, PreformattedString
    )


def is_anchor(node) -> bool:
    return (
        isinstance(node, Tag)
        and node.name == ANCHOR_TAG
        and str(node.get("id", "")).startswith(ANCHOR_ID_PREFIX)
    )


def text_nodes(anchor: Tag) -> list[NavigableString]:
    """Text nodes of an anchor in document order."""
    return [node for node in anchor.descendants if is_text_node(node)]


def anchor_text(anchor: Tag) -> str:
    return "".join(str(node) for node in text_nodes(anchor))


def find_anchor(node) -> Optional[Tag]:
    """The verse paragraph containing ``node``, if any."""
    current = node
    while current is not None and not isinstance(current, BeautifulSoup):
        if isinstance(current, Tag) and current.name == ANCHOR_TAG:
            return current if is_anchor(current) else None
        current = current.parent
    return None


def find_anchor_by_id(root: Tag, anchor_id: str) -> Optional[Tag]:
    if isinstance(root, Tag) and root.get("id") == anchor_id and is_anchor(root):
        return root
    return root.find(ANCHOR_TAG, id=anchor_id)


def _index_of(nodes: list[NavigableString], node) -> int:
    # Strings compare by value, so match on identity
    for index, candidate in enumerate(nodes):
        if candidate is node:
            return index
    return -1


def encode_location(text_range: TextRange) -> Optional[Location]:
    """
    Encode a selection confined to one verse.

    Returns None if the selection spans verses, is collapsed, has a boundary
    that is not a text node of the verse, or resolves to ``start >= end``.
    """
    if text_range.collapsed:
        return None

    anchor = find_anchor(text_range.start.node)
    if anchor is None or find_anchor(text_range.end.node) is not anchor:
        return None

    nodes = text_nodes(anchor)
    start_index = _index_of(nodes, text_range.start.node)
    end_index = _index_of(nodes, text_range.end.node)
    if start_index < 0 or end_index < 0:
        return None

    offsets = encode_offsets(
        [len(node) for node in nodes],
        (start_index, text_range.start.offset),
        (end_index, text_range.end.offset),
    )
    if offsets is None:
        return None
    return Location(anchorId=anchor["id"], start=offsets[0], end=offsets[1])


def decode_location(anchor: Tag, start: int, end: int) -> Optional[TextRange]:
    """
    Rebuild a live range inside a freshly rendered verse.

    Returns None instead of raising when the offsets no longer fit the text,
    which signals a stale location.
    """
    nodes = text_nodes(anchor)
    points = decode_offsets([len(node) for node in nodes], start, end)
    if points is None:
        return None

    (start_index, start_offset), (end_index, end_offset) = points
    return TextRange(
        start=TextPoint(nodes[start_index], start_offset),
        end=TextPoint(nodes[end_index], end_offset),
    )


def range_text(text_range: TextRange) -> str:
    """The characters a range covers."""
    anchor = find_anchor(text_range.start.node)
    if anchor is None:
        return ""
    nodes = text_nodes(anchor)
    start_index = _index_of(nodes, text_range.start.node)
    end_index = _index_of(nodes, text_range.end.node)
    if start_index < 0 or end_index < start_index:
        return ""
    if start_index == end_index:
        return str(nodes[start_index])[text_range.start.offset : text_range.end.offset]

    parts = [str(nodes[start_index])[text_range.start.offset :]]
    parts.extend(str(node) for node in nodes[start_index + 1 : end_index])
    parts.append(str(nodes[end_index])[: text_range.end.offset])
    return "".join(parts)
