"""
HTTP client for the annotation API.

Every transport failure and every unexpected status becomes a
``PersistenceError``; a duplicate id becomes ``PersistenceConflictError``.
Calls always carry a timeout so a dead server can't leave the reader waiting
forever.
"""

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from .. import config
from ..models.annotations import Annotation
from .errors import PersistenceConflictError, PersistenceError
from .state import Scope

logger = logging.getLogger(__name__)


class AnnotationsClient:
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

    async def __aenter__(self) -> "AnnotationsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Annotation API request failed: {method} {url}: {e}")
            raise PersistenceError(f"Annotation API unreachable: {e}") from e

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        try:
            return str(response.json().get("detail", response.reason_phrase))
        except (ValueError, AttributeError):
            return response.reason_phrase

    async def list_annotations(self, scope: Scope) -> List[Annotation]:
        response = await self._request(
            "GET",
            "/api/highlights",
            params={
                "translation": scope.translation,
                "bookId": scope.book_id,
                "chapter": scope.chapter,
            },
        )
        if response.status_code != 200:
            raise PersistenceError(
                f"Failed to fetch highlights: {self._detail(response)}",
                status_code=response.status_code,
            )
        try:
            return [Annotation(**item) for item in response.json()]
        except (ValueError, TypeError) as e:
            raise PersistenceError(f"Malformed highlights response: {e}") from e

    async def create_annotation(self, annotation: Annotation) -> Annotation:
        response = await self._request(
            "POST",
            "/api/highlights",
            json=annotation.model_dump(mode="json", exclude_none=True),
        )
        if response.status_code == 409:
            raise PersistenceConflictError(
                self._detail(response), status_code=response.status_code
            )
        if response.status_code != 201:
            raise PersistenceError(
                f"Failed to save highlight: {self._detail(response)}",
                status_code=response.status_code,
            )
        try:
            return Annotation(**response.json())
        except (ValueError, TypeError) as e:
            raise PersistenceError(f"Malformed save response: {e}") from e

    async def delete_annotation(self, annotation_id: str) -> bool:
        """True if the row was removed, False if it did not exist."""
        response = await self._request(
            "DELETE", f"/api/highlights/delete/{quote(annotation_id, safe='')}"
        )
        if response.status_code == 404:
            return False
        if response.status_code not in (200, 204):
            raise PersistenceError(
                f"Failed to delete highlight: {self._detail(response)}",
                status_code=response.status_code,
            )
        return True
