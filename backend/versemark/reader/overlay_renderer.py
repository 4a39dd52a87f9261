"""
Overlay Renderer

Applies and removes the visual treatment of annotations on a rendered chapter.

A highlight wraps its characters in ``span.highlight-only``. A note wraps them
in ``span.note-text`` and puts an empty ``span.note-symbol`` marker right
before the wrapper; the note body lives in the marker's ``data-note``
attribute so it is never read back as verse text.

Wrapping mirrors a DOM range extraction: boundary text nodes are split, and
elements only partly covered by the range are split into shallow clones up to
the nearest common ancestor. An overlay can therefore end up as several
wrapper fragments sharing one ``data-highlight-id`` when it overlaps an
earlier overlay; removal unwraps all of them.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from ..models.annotations import Annotation, AnnotationKind
from .errors import StaleLocationError
from .location_codec import (
    TextRange,
    anchor_text,
    decode_location,
    find_anchor_by_id,
)

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS = "highlight-only"
NOTE_TEXT_CLASS = "note-text"
NOTE_SYMBOL_CLASS = "note-symbol"
ID_ATTR = "data-highlight-id"
NOTE_ATTR = "data-note"


@dataclass
class RenderReport:
    """Outcome of one render pass over a chapter"""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[StaleLocationError] = field(default_factory=list)
    discarded: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failures and self.error is None and not self.discarded


# ---------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------


def _document_of(node) -> BeautifulSoup:
    for parent in node.parents:
        if isinstance(parent, BeautifulSoup):
            return parent
    raise ValueError("Node is not attached to a document")


def _has_class(tag: Tag, name: str) -> bool:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return name in classes


def _shallow_clone(document: BeautifulSoup, tag: Tag) -> Tag:
    attrs = {
        key: list(value) if isinstance(value, list) else value
        for key, value in tag.attrs.items()
    }
    return document.new_tag(tag.name, attrs=attrs)


def _split_text(node: NavigableString, offset: int) -> tuple[NavigableString, NavigableString]:
    text = str(node)
    left = NavigableString(text[:offset])
    right = NavigableString(text[offset:])
    node.replace_with(left)
    left.insert_after(right)
    return left, right


def _isolate(text_range: TextRange) -> tuple[NavigableString, NavigableString]:
    """Split boundary text nodes so the range covers whole nodes only."""
    start, end = text_range.start, text_range.end

    if start.node is end.node:
        middle = start.node
        if end.offset < len(middle):
            middle, _ = _split_text(middle, end.offset)
        if start.offset > 0:
            _, middle = _split_text(middle, start.offset)
        return middle, middle

    first = start.node
    if start.offset > 0:
        _, first = _split_text(first, start.offset)
    last = end.node
    if end.offset < len(last):
        last, _ = _split_text(last, end.offset)
    return first, last


def _common_ancestor(first, last) -> Tag:
    first_parents = {id(parent) for parent in first.parents}
    for parent in last.parents:
        if id(parent) in first_parents:
            return parent
    raise ValueError("Range boundaries do not share a document")


def _split_before(document: BeautifulSoup, node, container: Tag):
    """Climb to the child of ``container`` that starts with ``node``."""
    while node.parent is not container:
        parent = node.parent
        index = parent.index(node)
        if index > 0:
            clone = _shallow_clone(document, parent)
            for sibling in list(parent.contents[:index]):
                clone.append(sibling.extract())
            parent.insert_before(clone)
        node = parent
    return node


def _split_after(document: BeautifulSoup, node, container: Tag):
    """Climb to the child of ``container`` that ends with ``node``."""
    while node.parent is not container:
        parent = node.parent
        index = parent.index(node)
        if index < len(parent.contents) - 1:
            clone = _shallow_clone(document, parent)
            for sibling in list(parent.contents[index + 1 :]):
                clone.append(sibling.extract())
            parent.insert_after(clone)
        node = parent
    return node


def wrap_range(text_range: TextRange, wrapper: Tag) -> Tag:
    """Move the range's contents into ``wrapper``, placed where they were."""
    document = _document_of(text_range.start.node)
    first, last = _isolate(text_range)
    container = first.parent if first is last else _common_ancestor(first, last)

    head = _split_before(document, first, container)
    tail = _split_after(document, last, container)

    covered = [head]
    while covered[-1] is not tail:
        covered.append(covered[-1].next_sibling)

    head.insert_before(wrapper)
    for node in covered:
        wrapper.append(node.extract())
    return wrapper


# ---------------------------------------------------------------------
# Overlays
# ---------------------------------------------------------------------


def has_overlay(root: Tag, annotation_id: str) -> bool:
    return root.find(attrs={ID_ATTR: annotation_id}) is not None


def apply_overlay(anchor: Tag, annotation: Annotation) -> Tag:
    """
    Wrap an annotation's characters inside a rendered verse.

    Returns the wrapper element.

    Raises:
        StaleLocationError: If the stored offsets no longer fit the verse
    """
    text_range = decode_location(anchor, annotation.start, annotation.end)
    if text_range is None:
        raise StaleLocationError(
            annotation.id,
            f"offsets [{annotation.start}:{annotation.end}] do not fit "
            f"{annotation.anchorId} (text length {len(anchor_text(anchor))})",
        )

    document = _document_of(anchor)
    if annotation.kind == AnnotationKind.NOTE:
        wrapper = document.new_tag(
            "span", attrs={"class": NOTE_TEXT_CLASS, ID_ATTR: annotation.id}
        )
    else:
        wrapper = document.new_tag(
            "span", attrs={"class": HIGHLIGHT_CLASS, ID_ATTR: annotation.id}
        )

    wrap_range(text_range, wrapper)

    if annotation.kind == AnnotationKind.NOTE:
        marker = document.new_tag(
            "span",
            attrs={
                "class": NOTE_SYMBOL_CLASS,
                ID_ATTR: annotation.id,
                NOTE_ATTR: annotation.note or "",
            },
        )
        wrapper.insert_before(marker)
    return wrapper


def apply_annotations(root: Tag, annotations: Iterable[Annotation]) -> RenderReport:
    """
    Apply annotations in order, each at most once.

    A verse that is not rendered or a location that no longer decodes is
    recorded and logged; the remaining annotations are still applied.
    """
    report = RenderReport()
    for annotation in annotations:
        anchor = find_anchor_by_id(root, annotation.anchorId)
        if anchor is None:
            failure = StaleLocationError(
                annotation.id, f"{annotation.anchorId} is not rendered"
            )
            logger.warning("Skipping overlay %s", failure)
            report.failures.append(failure)
            continue

        if has_overlay(anchor, annotation.id):
            report.skipped.append(annotation.id)
            continue

        try:
            apply_overlay(anchor, annotation)
        except StaleLocationError as failure:
            logger.warning("Skipping overlay %s", failure)
            report.failures.append(failure)
            continue
        except ValueError as exc:
            failure = StaleLocationError(annotation.id, str(exc))
            logger.error("Failed to apply overlay %s", failure)
            report.failures.append(failure)
            continue

        report.applied.append(annotation.id)
    return report


def remove_overlay(root: Tag, annotation_id: str) -> bool:
    """
    Unwrap every fragment of an overlay and drop its note marker.

    Returns True if anything was removed.
    """
    elements = root.find_all(attrs={ID_ATTR: annotation_id})
    for element in elements:
        if _has_class(element, NOTE_SYMBOL_CLASS):
            element.decompose()
        else:
            element.unwrap()

    if elements:
        logger.debug("Removed %d overlay element(s) for %s", len(elements), annotation_id)
    return bool(elements)
