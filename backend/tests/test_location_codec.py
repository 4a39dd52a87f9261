"""
Unit tests for the location codec.

Tests cover:
- Encoding selections inside one verse
- Offsets measured over text only, not markup
- Rejection of collapsed, inverted and cross-verse selections
- Decoding against a freshly rendered verse
- Stale locations decoding to None
"""

from bs4 import BeautifulSoup

from versemark.reader.location_codec import (
    Location,
    TextPoint,
    TextRange,
    anchor_text,
    decode_location,
    encode_location,
    find_anchor_by_id,
    range_text,
    text_nodes,
)

GENESIS = '<p id="verse-1-1-1" class="verse">In the beginning God created</p>'
MARKED_UP = (
    '<p id="verse-1-1-1" class="verse"><span class="verse-text">'
    '<span class="word">In</span> <em><span class="word">the</span></em> '
    '<span class="word">beginning</span> God <i>created</i></span></p>'
)


def render(html: str) -> BeautifulSoup:
    return BeautifulSoup(f'<div id="bible-content">{html}</div>', "html.parser")


def anchor_of(document: BeautifulSoup, anchor_id: str = "verse-1-1-1"):
    return find_anchor_by_id(document, anchor_id)


class TestEncodeLocation:
    def test_selection_of_the(self):
        """Characters 3-6 of the verse encode to {3, 6}"""
        document = render(GENESIS)
        node = text_nodes(anchor_of(document))[0]

        location = encode_location(TextRange(TextPoint(node, 3), TextPoint(node, 6)))

        assert location == Location(anchorId="verse-1-1-1", start=3, end=6)

    def test_markup_contributes_no_characters(self):
        document = render(MARKED_UP)
        nodes = text_nodes(anchor_of(document))
        the = next(n for n in nodes if str(n) == "the")
        created = next(n for n in nodes if str(n) == "created")

        location = encode_location(
            TextRange(TextPoint(the, 0), TextPoint(created, 7))
        )

        assert location == Location(anchorId="verse-1-1-1", start=3, end=28)

    def test_collapsed_selection_rejected(self):
        document = render(GENESIS)
        node = text_nodes(anchor_of(document))[0]

        assert encode_location(TextRange(TextPoint(node, 4), TextPoint(node, 4))) is None

    def test_inverted_selection_rejected(self):
        document = render(GENESIS)
        node = text_nodes(anchor_of(document))[0]

        assert encode_location(TextRange(TextPoint(node, 6), TextPoint(node, 3))) is None

    def test_selection_across_verses_rejected(self):
        document = render(
            '<p id="verse-1-1-1">In the beginning</p><p id="verse-1-1-2">And the earth</p>'
        )
        first = text_nodes(anchor_of(document, "verse-1-1-1"))[0]
        second = text_nodes(anchor_of(document, "verse-1-1-2"))[0]

        assert encode_location(TextRange(TextPoint(first, 3), TextPoint(second, 3))) is None

    def test_selection_outside_any_verse_rejected(self):
        document = BeautifulSoup("<div><p>Heading text</p></div>", "html.parser")
        node = document.p.string

        assert encode_location(TextRange(TextPoint(node, 0), TextPoint(node, 4))) is None

    def test_detached_node_rejected(self):
        document = render(GENESIS)
        node = text_nodes(anchor_of(document))[0]
        stray = document.new_string("elsewhere")

        assert encode_location(TextRange(TextPoint(node, 0), TextPoint(stray, 2))) is None

    def test_equal_text_in_different_nodes_is_not_confused(self):
        """Identical strings are told apart by identity, not value"""
        document = render('<p id="verse-1-1-1"><b>amen</b> <b>amen</b></p>')
        nodes = text_nodes(anchor_of(document))

        location = encode_location(TextRange(TextPoint(nodes[2], 0), TextPoint(nodes[2], 4)))

        assert location == Location(anchorId="verse-1-1-1", start=5, end=9)


class TestDecodeLocation:
    def test_recovers_the(self):
        document = render(GENESIS)

        text_range = decode_location(anchor_of(document), 3, 6)

        assert text_range is not None
        assert range_text(text_range) == "the"

    def test_round_trip_against_fresh_render(self):
        """Decoding on a rebuilt tree yields the same characters"""
        original = render(MARKED_UP)
        nodes = text_nodes(anchor_of(original))
        selection = TextRange(TextPoint(nodes[2], 1), TextPoint(nodes[4], 5))
        location = encode_location(selection)

        fresh = render(MARKED_UP)
        decoded = decode_location(anchor_of(fresh), location.start, location.end)

        assert range_text(decoded) == range_text(selection) == "he begin"
        assert decoded.start.offset == selection.start.offset
        assert decoded.end.offset == selection.end.offset
        assert encode_location(decoded) == location

    def test_round_trip_when_markup_differs(self):
        """Same text wrapped differently still decodes to the same characters"""
        location = Location(anchorId="verse-1-1-1", start=7, end=16)

        plain = decode_location(anchor_of(render(GENESIS)), location.start, location.end)
        marked = decode_location(anchor_of(render(MARKED_UP)), location.start, location.end)

        assert range_text(plain) == range_text(marked) == "beginning"

    def test_stale_location_returns_none(self):
        document = render('<p id="verse-1-1-1">In the</p>')

        assert decode_location(anchor_of(document), 3, 16) is None

    def test_full_verse(self):
        document = render(GENESIS)
        anchor = anchor_of(document)
        length = len(anchor_text(anchor))

        assert range_text(decode_location(anchor, 0, length)) == "In the beginning God created"

    def test_comments_are_not_text(self):
        document = render('<p id="verse-1-1-1">In <!-- translator note -->the</p>')
        anchor = anchor_of(document)

        assert anchor_text(anchor) == "In the"
        assert range_text(decode_location(anchor, 3, 6)) == "the"
