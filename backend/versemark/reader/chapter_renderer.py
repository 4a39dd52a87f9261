"""
Chapter Renderer

Turns the provider's verses into a chapter document: one ``p.verse`` anchor
per verse holding the verse number and the verse text. Provider markup is
kept, and every word of its text becomes a clickable ``span.word``. The
rendered text is what annotation offsets are measured against.
"""

import logging
import re
from html import escape
from typing import Iterable

from bs4 import BeautifulSoup, NavigableString, Tag

from ..models.annotations import make_anchor_id
from ..models.verses import Verse
from .location_codec import is_text_node

logger = logging.getLogger(__name__)

CONTENT_ID = "bible-content"
_WHITESPACE = re.compile(r"(\s+)")


def new_chapter_document() -> BeautifulSoup:
    return BeautifulSoup(f'<div id="{CONTENT_ID}"></div>', "html.parser")


def content_root(document: BeautifulSoup) -> Tag:
    return document.find(id=CONTENT_ID)


def _word_nodes(document: BeautifulSoup, text: str) -> list:
    nodes = []
    for part in _WHITESPACE.split(text):
        if not part:
            continue
        if part.strip():
            word = document.new_tag("span", attrs={"class": "word"})
            word.string = part
            nodes.append(word)
        else:
            nodes.append(NavigableString(part))
    return nodes


def _process_node(document: BeautifulSoup, node) -> list:
    if is_text_node(node):
        return _word_nodes(document, str(node))
    if isinstance(node, Tag):
        attrs = {
            key: list(value) if isinstance(value, list) else value
            for key, value in node.attrs.items()
        }
        copy = document.new_tag(node.name, attrs=attrs)
        for child in list(node.contents):
            for processed in _process_node(document, child):
                copy.append(processed)
        return [copy]
    # Comments and other non-text strings are dropped
    return []


def render_verse(document: BeautifulSoup, verse: Verse, book_id: int, chapter: int) -> Tag:
    paragraph = document.new_tag(
        "p",
        attrs={"id": make_anchor_id(book_id, chapter, verse.verse), "class": "verse"},
    )

    number = document.new_tag("span", attrs={"class": "verse-number"})
    number.string = str(verse.verse)
    paragraph.append(number)

    text_span = document.new_tag("span", attrs={"class": "verse-text"})
    source = BeautifulSoup(verse.text, "html.parser")
    for child in list(source.contents):
        for processed in _process_node(document, child):
            text_span.append(processed)
    paragraph.append(text_span)
    return paragraph


def render_chapter(verses: Iterable[Verse], book_id: int, chapter: int) -> BeautifulSoup:
    """Build a fresh chapter document from scratch."""
    document = new_chapter_document()
    root = content_root(document)
    count = 0
    for verse in verses:
        root.append(render_verse(document, verse, book_id, chapter))
        count += 1
    logger.debug("Rendered %d verses for book %s chapter %s", count, book_id, chapter)
    return document


def render_load_error(translation: str, details: str) -> BeautifulSoup:
    """Inline error shown in place of a chapter that failed to load."""
    document = new_chapter_document()
    content_root(document).append(
        BeautifulSoup(
            "<p><strong>Error loading Bible text.</strong></p>"
            f"<p>This may be because the selected translation ('{escape(translation)}') "
            "is not supported by the API.</p>"
            "<p>Commonly available free translations are KJV, YLT, and WEB.</p>"
            f"<p><small>Details: {escape(details)}</small></p>",
            "html.parser",
        )
    )
    return document
