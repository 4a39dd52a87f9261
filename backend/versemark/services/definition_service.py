"""
Definition Lookup Service

Looks up the Strong's concordance entry for a word in a verse by scraping the
lexicon site's interlinear and lexicon pages. The page structure is owned by a
third party and can change at any time, so the annotation core never depends
on this service: consumers go through the ``DefinitionLookup`` capability,
which always resolves to either a definition or ``DefinitionUnavailable``.
"""

import logging
from typing import Protocol
from urllib.parse import quote_plus

import httpx
from bs4 import BeautifulSoup

from .. import config
from ..models.definitions import (
    DefinitionRequest,
    DefinitionUnavailable,
    StrongsDefinition,
)
from .errors import DefinitionNotFoundError, UpstreamError

logger = logging.getLogger(__name__)


class DefinitionLookup(Protocol):
    """Single-method capability for word definitions"""

    async def lookup(
        self, request: DefinitionRequest
    ) -> StrongsDefinition | DefinitionUnavailable: ...


class DefinitionService:
    """Scrapes Strong's definitions from the lexicon site."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or config.LEXICON_URL).rstrip("/")
        self._client = client
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS

    def build_search_url(self, request: DefinitionRequest) -> str:
        """Interlinear search URL for the word, scoped to its verse."""
        verse_ref = f"{request.bookName}+{request.chapter}:{request.verse}"
        return (
            f"{self.base_url}/search/preSearch.cfm"
            f"?Criteria={quote_plus(request.word)}&t={request.translation}"
            f"&ss=1&source=from_interlinear&fromverse={quote_plus(verse_ref)}"
        )

    async def _get_page(self, client: httpx.AsyncClient, url: str) -> BeautifulSoup:
        response = await client.get(url)
        if response.status_code != 200:
            logger.warning(
                "Lexicon site returned %s for %s", response.status_code, url
            )
            raise UpstreamError(
                f"Lexicon site returned non-200 status: {response.status_code}",
                status_code=response.status_code,
            )
        return BeautifulSoup(response.text, "html.parser")

    def _find_definition_link(self, page: BeautifulSoup, word: str) -> str | None:
        # Match with "contains" since the interlinear word may carry punctuation
        needle = word.lower()
        for cell in page.select("td.calque-processed"):
            if needle not in cell.get_text().lower():
                continue
            row = cell.parent
            link = row.select_one("td.strongs-num-unprocessed a") if row else None
            if link and link.get("href"):
                return self.base_url + link["href"]
        return None

    @staticmethod
    def _parse_definition(page: BeautifulSoup) -> StrongsDefinition:
        def text_of(selector: str) -> str:
            element = page.select_one(selector)
            return element.get_text().strip() if element else ""

        paragraphs = [p.get_text() for p in page.select("#lexDef p")]
        definition = "\n\n".join(paragraphs).strip()
        if not definition:
            # Some entries are not wrapped in paragraphs
            definition = text_of("#lexDef")

        return StrongsDefinition(
            strongsNumber=text_of("#lexicon-head h1"),
            lexeme=text_of(".lex-lemma-head .lexeme"),
            transliteration=text_of(".lex-lemma-head .translit"),
            definition=definition,
        )

    async def fetch_definition(self, request: DefinitionRequest) -> StrongsDefinition:
        """
        Look up the definition, raising on every failure.

        Raises:
            DefinitionNotFoundError: The word has no Strong's link in the verse
            UpstreamError: The lexicon site answered with a non-200 status
            httpx.HTTPError: Transport failure
        """
        search_url = self.build_search_url(request)

        client = self._client or httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True
        )
        try:
            search_page = await self._get_page(client, search_url)
            definition_url = self._find_definition_link(search_page, request.word)
            if definition_url is None:
                logger.info(
                    "No Strong's link for '%s' at %s", request.word, search_url
                )
                raise DefinitionNotFoundError(
                    "Could not find a Strong's number link for the word in the "
                    "interlinear view of that verse. The site's structure may "
                    "have changed."
                )

            definition_page = await self._get_page(client, definition_url)
            return self._parse_definition(definition_page)
        finally:
            if self._client is None:
                await client.aclose()

    async def lookup(
        self, request: DefinitionRequest
    ) -> StrongsDefinition | DefinitionUnavailable:
        """Capability entry point: never raises for lookup failures."""
        try:
            return await self.fetch_definition(request)
        except DefinitionNotFoundError as exc:
            return DefinitionUnavailable(reason=str(exc))
        except UpstreamError as exc:
            return DefinitionUnavailable(reason=str(exc))
        except httpx.HTTPError as exc:
            logger.error("Lexicon request failed: %s", exc)
            return DefinitionUnavailable(reason="The lexicon site could not be reached")
