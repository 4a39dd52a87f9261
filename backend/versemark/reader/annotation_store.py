"""
Annotation Store

Reader-side orchestration of highlights and notes. It loads the annotations
of the displayed chapter, creates and deletes them through the annotation
API, and keeps the rendered chapter's overlays in step.

All tree mutation happens synchronously between awaits, so a render pass and
a create or delete never interleave their writes. Responses that arrive after
the reader has moved to another chapter are dropped instead of being applied
to the wrong verses.
"""

import logging
import uuid
from enum import Enum
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from ..models.annotations import Annotation, AnnotationKind
from ..models.verses import Verse
from . import chapter_renderer
from .annotations_client import AnnotationsClient
from .errors import (
    EmptyNoteError,
    InvalidSelectionError,
    PersistenceError,
    StaleLocationError,
    UnknownKindError,
)
from .location_codec import TextRange, encode_location, find_anchor_by_id
from .overlay_renderer import RenderReport, apply_annotations, apply_overlay, remove_overlay
from .state import ReaderState, Scope

logger = logging.getLogger(__name__)


class DeleteOutcome(Enum):
    REMOVED = "removed"
    ALREADY_ABSENT = "already_absent"


def new_annotation_id() -> str:
    return f"h-{uuid.uuid4().hex}"


class AnnotationStore:
    """
    Keeps stored annotations and the rendered chapter consistent.

    Usage:
        store = AnnotationStore(AnnotationsClient(), Scope("KJV", 43, 1))
        report = await store.render_chapter(verses)
        store.select(text_range)
        await store.create_annotation("note", "In the beginning")
    """

    def __init__(
        self,
        client: AnnotationsClient,
        scope: Optional[Scope] = None,
        document: Optional[Tag] = None,
    ):
        self.client = client
        self.state = ReaderState(scope=scope or Scope.default())
        self.document = document

    # ---------------------------------------------------------------------
    # State transitions
    # ---------------------------------------------------------------------

    def change_scope(self, scope: Scope) -> ReaderState:
        """Switch translation/book/chapter; pending selection is dropped."""
        if scope != self.state.scope:
            logger.info(
                "Scope changed to %s %s:%s", scope.translation, scope.book_id, scope.chapter
            )
        self.state = self.state.with_scope(scope)
        return self.state

    def select(self, text_range: Optional[TextRange]) -> ReaderState:
        self.state = self.state.with_selection(text_range)
        return self.state

    def close_modal(self) -> ReaderState:
        self.state = self.state.closed()
        return self.state

    def attach_document(self, document: Tag) -> None:
        """Use a freshly rendered chapter; overlays must be re-applied."""
        self.document = document

    # ---------------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------------

    async def load_annotations(
        self, translation: str, book_id: int, chapter: int
    ) -> List[Annotation]:
        """All annotations for a scope; an empty list is a normal result."""
        return await self.client.list_annotations(Scope(translation, book_id, chapter))

    async def create_annotation(
        self,
        kind: AnnotationKind | str,
        note_body: Optional[str] = None,
        selection: Optional[TextRange] = None,
    ) -> Annotation:
        """
        Save the current selection as a highlight or note and show it.

        Raises:
            UnknownKindError: Kind is neither highlight nor note
            InvalidSelectionError: The selection can't be encoded
            EmptyNoteError: A note with a blank body
            PersistenceConflictError: The id is already stored
            PersistenceError: The API failed; nothing is applied
        """
        try:
            kind = AnnotationKind(kind)
        except ValueError as e:
            raise UnknownKindError(f"Unknown annotation kind: {kind!r}") from e

        text_range = selection or self.state.selection
        if text_range is None:
            raise InvalidSelectionError("Nothing is selected")

        location = encode_location(text_range)
        if location is None:
            raise InvalidSelectionError("Selection is empty, spans verses, or is unresolvable")

        note = (note_body or "").strip()
        if kind == AnnotationKind.NOTE and not note:
            raise EmptyNoteError("A note needs some text")

        scope = self.state.scope
        try:
            annotation = Annotation(
                id=new_annotation_id(),
                kind=kind,
                anchorId=location.anchorId,
                start=location.start,
                end=location.end,
                note=note if kind == AnnotationKind.NOTE else None,
                translation=scope.translation,
                bookId=scope.book_id,
                chapter=scope.chapter,
            )
        except ValidationError as e:
            raise InvalidSelectionError(f"Selection does not belong to the displayed chapter: {e}") from e

        saved = await self.client.create_annotation(annotation)

        if self.state.scope != scope:
            logger.info("Saved %s after leaving its chapter; not applying", saved.id)
            return saved

        self.state.annotations.append(saved)
        self._apply_now(saved)
        self.close_modal()
        return saved

    def _apply_now(self, annotation: Annotation) -> None:
        if self.document is None:
            return
        anchor = find_anchor_by_id(self.document, annotation.anchorId)
        if anchor is None:
            logger.warning("Verse %s not rendered; %s not shown", annotation.anchorId, annotation.id)
            return
        try:
            apply_overlay(anchor, annotation)
        except StaleLocationError as e:
            logger.warning("Could not show new annotation %s", e)

    async def delete_annotation(self, annotation_id: str) -> DeleteOutcome:
        """
        Delete an annotation and its overlay.

        An id the API doesn't know counts as deleted. Any other failure
        raises ``PersistenceError`` and leaves the overlay in place.
        """
        removed = await self.client.delete_annotation(annotation_id)
        outcome = DeleteOutcome.REMOVED if removed else DeleteOutcome.ALREADY_ABSENT

        if self.document is not None:
            remove_overlay(self.document, annotation_id)
        self.state.annotations = [
            a for a in self.state.annotations if a.id != annotation_id
        ]
        return outcome

    async def reapply_all(
        self, translation: str, book_id: int, chapter: int
    ) -> RenderReport:
        """
        Load a scope's annotations and apply them to the rendered chapter.

        Decode failures are isolated per annotation. A failed load is reported
        on the returned report rather than raised so it never breaks the
        render loop.
        """
        scope = Scope(translation, book_id, chapter)
        try:
            annotations = await self.load_annotations(translation, book_id, chapter)
        except PersistenceError as e:
            logger.error(f"Could not load highlights: {e}")
            return RenderReport(error=e.user_message)

        if self.state.scope != scope:
            logger.info(
                "Dropping highlights for %s %s:%s; no longer displayed",
                translation,
                book_id,
                chapter,
            )
            return RenderReport(discarded=True)

        if self.document is None:
            logger.warning("No rendered chapter to apply highlights to")
            return RenderReport(discarded=True)

        self.state.annotations = list(annotations)
        report = apply_annotations(self.document, annotations)
        if report.failures:
            logger.warning(
                "%d of %d annotations could not be shown",
                len(report.failures),
                len(annotations),
            )
        return report

    async def render_chapter(self, verses: Iterable[Verse]) -> RenderReport:
        """Render the current scope's verses from scratch, then re-apply."""
        scope = self.state.scope
        document = chapter_renderer.render_chapter(verses, scope.book_id, scope.chapter)
        self.attach_document(document)
        return await self.reapply_all(scope.translation, scope.book_id, scope.chapter)

    def show_load_error(self, details: str) -> BeautifulSoup:
        document = chapter_renderer.render_load_error(self.state.scope.translation, details)
        self.attach_document(document)
        return document
