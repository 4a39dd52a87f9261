"""
Reader session: navigation glue between the text provider and the store.

Opening a chapter switches the store's scope first, so responses still in
flight for the previous chapter are recognised as stale and dropped.
"""

import logging
from typing import List, Optional

from bs4 import Tag

from ..models.verses import Book
from .annotation_store import AnnotationStore
from .overlay_renderer import RenderReport
from .state import Scope
from .text_provider import TextProviderClient, TextProviderError, pick_default_book

logger = logging.getLogger(__name__)


class ReaderSession:
    def __init__(self, provider: TextProviderClient, store: AnnotationStore):
        self.provider = provider
        self.store = store
        self.books: List[Book] = []

    @property
    def document(self) -> Optional[Tag]:
        return self.store.document

    async def load_books(self, translation: str) -> Optional[Book]:
        """
        Load the book list of a translation and pick the starting book.

        Returns None (and shows an inline error) when the list can't be loaded.
        """
        translation = translation.upper()
        try:
            self.books = await self.provider.get_books(translation)
        except TextProviderError as e:
            logger.error(f"Failed to load books: {e}")
            self.books = []
            self.store.change_scope(Scope(translation, self.store.state.scope.book_id, 1))
            self.store.show_load_error(f"Could not load book list for {translation}. {e}")
            return None
        return pick_default_book(self.books)

    async def open_chapter(
        self, translation: str, book_id: int, chapter: int
    ) -> RenderReport:
        """Fetch, render and annotate one chapter."""
        self.store.change_scope(Scope(translation, book_id, chapter))
        try:
            verses = await self.provider.get_chapter(translation, book_id, chapter)
        except TextProviderError as e:
            logger.error(f"Failed to load Bible text: {e}")
            self.store.show_load_error(str(e))
            return RenderReport(error=str(e))

        if self.store.state.scope != Scope(translation, book_id, chapter):
            logger.info("Chapter text arrived after navigating away; dropping")
            return RenderReport(discarded=True)

        return await self.store.render_chapter(verses)
