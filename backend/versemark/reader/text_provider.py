"""
Remote scripture text provider.

Fetches book lists and chapter text. Verse text is markup whose flattened
text decides which annotation offsets are valid; the reader never edits it.
"""

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .. import config
from ..models.verses import Book, Verse

logger = logging.getLogger(__name__)


class TextProviderError(Exception):
    """The provider failed or answered with something unusable"""


class TextProviderClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or config.TEXT_PROVIDER_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout or config.HTTP_TIMEOUT_SECONDS
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str):
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Text provider request failed: {url}: {e}")
            raise TextProviderError(f"Text provider unreachable: {e}") from e

        if response.status_code != 200:
            message = f"API request failed: {response.status_code} {response.reason_phrase}"
            # Prefer the provider's own explanation when it sends one
            try:
                detail = response.json().get("detail")
                if detail:
                    message = str(detail)
            except (ValueError, AttributeError):
                pass
            raise TextProviderError(message)

        try:
            return response.json()
        except ValueError as e:
            raise TextProviderError(f"Provider returned invalid JSON: {e}") from e

    async def get_books(self, translation: str) -> List[Book]:
        data = await self._get_json(f"/get-books/{translation}/")
        if not isinstance(data, list):
            raise TextProviderError("API response was not in the expected format (a list of books).")
        try:
            return [Book(**item) for item in data]
        except (ValidationError, TypeError) as e:
            raise TextProviderError(f"Unexpected book entry: {e}") from e

    async def get_chapter(self, translation: str, book_id: int, chapter: int) -> List[Verse]:
        data = await self._get_json(f"/get-chapter/{translation}/{book_id}/{chapter}/")
        if not isinstance(data, list):
            raise TextProviderError(
                "API response was not in the expected format (an array of verses)."
            )
        try:
            return [Verse(**item) for item in data]
        except (ValidationError, TypeError) as e:
            raise TextProviderError(f"Unexpected verse entry: {e}") from e


def pick_default_book(books: List[Book], preferred: Optional[int] = None) -> Optional[Book]:
    """The preferred book if the translation has it, else the first one."""
    if not books:
        return None
    preferred = config.DEFAULT_BOOK_ID if preferred is None else preferred
    for book in books:
        if book.bookid == preferred:
            return book
    return books[0]
