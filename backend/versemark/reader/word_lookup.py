"""
Word definition lookup from the reader.

Clicking a word span asks the API for its Strong's definition. The lookup is
a sibling feature of annotations: every failure resolves to
``DefinitionUnavailable`` and nothing in the annotation flow waits on it.
"""

import logging
import re
from typing import Iterable, Optional

import httpx
from bs4 import Tag
from pydantic import ValidationError

from .. import config
from ..models.annotations import parse_anchor_id
from ..models.definitions import (
    DefinitionRequest,
    DefinitionUnavailable,
    StrongsDefinition,
)
from ..models.verses import Book
from .location_codec import find_anchor

logger = logging.getLogger(__name__)

_TRAILING_PUNCTUATION = re.compile(r"""[.,;:"'?!()]$""")


def definition_request_for(
    word_element: Tag, translation: str, books: Iterable[Book]
) -> Optional[DefinitionRequest]:
    """Build the lookup for a clicked word, or None without verse context."""
    word = _TRAILING_PUNCTUATION.sub("", word_element.get_text().strip())
    if not word:
        return None

    anchor = find_anchor(word_element)
    if anchor is None:
        return None
    parsed = parse_anchor_id(anchor["id"])
    if parsed is None:
        return None

    book_id, chapter, verse = parsed
    book = next((b for b in books if b.bookid == book_id), None)
    if book is None:
        return None

    return DefinitionRequest(
        word=word,
        translation=translation,
        bookName=book.name,
        chapter=chapter,
        verse=verse,
    )


class DefinitionApiClient:
    """``DefinitionLookup`` backed by the API's Strong's endpoint"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or config.HTTP_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def lookup(
        self, request: DefinitionRequest
    ) -> StrongsDefinition | DefinitionUnavailable:
        try:
            response = await self._client.get(
                "/api/strongs_definition", params=request.model_dump()
            )
        except httpx.HTTPError as e:
            logger.error(f"Definition lookup failed: {e}")
            return DefinitionUnavailable(reason="The definition service could not be reached")

        if response.status_code != 200:
            try:
                reason = str(response.json().get("detail", response.reason_phrase))
            except (ValueError, AttributeError):
                reason = response.reason_phrase
            return DefinitionUnavailable(reason=reason)

        try:
            return StrongsDefinition(**response.json())
        except (ValidationError, ValueError, TypeError):
            return DefinitionUnavailable(reason="The definition service sent an unexpected response")
