"""
Tests for the Strong's definition lookup.

The lexicon site is replaced by an httpx MockTransport serving small fixture
pages, so no test touches the network.
"""

import os
import tempfile

import httpx
import pytest
from fastapi.testclient import TestClient

from versemark.api import create_app
from versemark.models.definitions import (
    DefinitionRequest,
    DefinitionUnavailable,
    StrongsDefinition,
)
from versemark.models.verses import Book, Verse
from versemark.reader.chapter_renderer import render_chapter
from versemark.reader.word_lookup import DefinitionApiClient, definition_request_for
from versemark.services.definition_service import DefinitionService
from versemark.services.errors import DefinitionNotFoundError, UpstreamError

LEXICON_URL = "https://lexicon.test"

SEARCH_PAGE = """
<table>
  <tr>
    <td class="strongs-num-unprocessed"><a href="/lexicon/g1722/kjv/tr/0-1/">G1722</a></td>
    <td class="calque-processed">In</td>
  </tr>
  <tr>
    <td class="strongs-num-unprocessed"><a href="/lexicon/g3056/kjv/tr/0-1/">G3056</a></td>
    <td class="calque-processed">the Word,</td>
  </tr>
</table>
"""

LEXICON_PAGE = """
<div id="lexicon-head"><h1>G3056 - logos</h1></div>
<div class="lex-lemma-head">
  <span class="lexeme">λόγος</span>
  <span class="translit">logos</span>
</div>
<div id="lexDef"><p>a word, uttered by a living voice</p><p>a saying</p></div>
"""

WORD_REQUEST = DefinitionRequest(
    word="Word", translation="KJV", bookName="John", chapter=1, verse=1
)


def lexicon_handler(search_page=SEARCH_PAGE, lexicon_page=LEXICON_PAGE, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/search/preSearch.cfm":
            return httpx.Response(status, text=search_page)
        if request.url.path.startswith("/lexicon/g3056/"):
            return httpx.Response(200, text=lexicon_page)
        return httpx.Response(404, text="not here")

    return handler


def make_service(handler) -> DefinitionService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DefinitionService(base_url=LEXICON_URL, client=client)


@pytest.fixture
def temp_db_path():
    with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".db") as f:
        db_path = f.name

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


class TestDefinitionService:
    def test_search_url_is_scoped_to_verse(self):
        service = DefinitionService(base_url=LEXICON_URL)

        url = service.build_search_url(WORD_REQUEST)

        assert url.startswith(f"{LEXICON_URL}/search/preSearch.cfm?")
        assert "Criteria=Word" in url
        assert "t=KJV" in url
        assert "fromverse=John%2B1%3A1" in url

    @pytest.mark.asyncio
    async def test_fetch_definition(self):
        service = make_service(lexicon_handler())

        definition = await service.fetch_definition(WORD_REQUEST)

        assert definition == StrongsDefinition(
            strongsNumber="G3056 - logos",
            lexeme="λόγος",
            transliteration="logos",
            definition="a word, uttered by a living voice\n\na saying",
        )

    @pytest.mark.asyncio
    async def test_definition_without_paragraphs(self):
        page = '<div id="lexicon-head"><h1>G3056</h1></div><div id="lexDef"> a word </div>'
        service = make_service(lexicon_handler(lexicon_page=page))

        definition = await service.fetch_definition(WORD_REQUEST)

        assert definition.definition == "a word"
        assert definition.lexeme == ""

    @pytest.mark.asyncio
    async def test_word_not_in_verse(self):
        service = make_service(lexicon_handler())
        request = WORD_REQUEST.model_copy(update={"word": "Light"})

        with pytest.raises(DefinitionNotFoundError):
            await service.fetch_definition(request)

        result = await service.lookup(request)
        assert isinstance(result, DefinitionUnavailable)
        assert "Strong's number" in result.reason

    @pytest.mark.asyncio
    async def test_upstream_error(self):
        service = make_service(lexicon_handler(status=503))

        with pytest.raises(UpstreamError) as exc_info:
            await service.fetch_definition(WORD_REQUEST)
        assert exc_info.value.status_code == 503

        result = await service.lookup(WORD_REQUEST)
        assert isinstance(result, DefinitionUnavailable)

    @pytest.mark.asyncio
    async def test_unreachable_site(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await make_service(handler).lookup(WORD_REQUEST)

        assert result == DefinitionUnavailable(reason="The lexicon site could not be reached")


class TestDefinitionRouter:
    @pytest.fixture
    def client(self, temp_db_path):
        def factory(handler):
            app = create_app(db_path=temp_db_path, definition_service=make_service(handler))
            return TestClient(app)

        return factory

    def test_found(self, client):
        response = client(lexicon_handler()).get(
            "/api/strongs_definition", params=WORD_REQUEST.model_dump()
        )

        assert response.status_code == 200
        assert response.json()["strongsNumber"] == "G3056 - logos"

    def test_not_found_is_404(self, client):
        params = {**WORD_REQUEST.model_dump(), "word": "Light"}

        response = client(lexicon_handler()).get("/api/strongs_definition", params=params)

        assert response.status_code == 404

    def test_upstream_status_is_502(self, client):
        response = client(lexicon_handler(status=500)).get(
            "/api/strongs_definition", params=WORD_REQUEST.model_dump()
        )

        assert response.status_code == 502

    def test_missing_parameter_is_400(self, client):
        params = WORD_REQUEST.model_dump()
        del params["verse"]

        response = client(lexicon_handler()).get("/api/strongs_definition", params=params)

        assert response.status_code == 400


class TestWordLookup:
    BOOKS = [Book(bookid=43, name="John", chapters=21)]

    def word_span(self, text):
        document = render_chapter(
            [Verse(verse=1, text="In the beginning was the Word,")], 43, 1
        )
        return document.find("span", class_="word", string=text)

    def test_request_for_clicked_word(self):
        request = definition_request_for(self.word_span("Word,"), "KJV", self.BOOKS)

        assert request == WORD_REQUEST

    def test_unknown_book(self):
        books = [Book(bookid=1, name="Genesis", chapters=50)]

        assert definition_request_for(self.word_span("Word,"), "KJV", books) is None

    @pytest.mark.asyncio
    async def test_lookup_through_api(self, temp_db_path):
        app = create_app(
            db_path=temp_db_path, definition_service=make_service(lexicon_handler())
        )
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        lookup = DefinitionApiClient(client=http)

        try:
            found = await lookup.lookup(WORD_REQUEST)
            missing = await lookup.lookup(WORD_REQUEST.model_copy(update={"word": "Light"}))
        finally:
            await http.aclose()

        assert isinstance(found, StrongsDefinition)
        assert found.transliteration == "logos"
        assert isinstance(missing, DefinitionUnavailable)
        assert "Strong's number" in missing.reason
