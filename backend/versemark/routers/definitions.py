import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..models.definitions import DefinitionRequest, StrongsDefinition
from ..services.definition_service import DefinitionService
from ..services.errors import DefinitionNotFoundError, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["definitions"])


def get_definition_service(request: Request) -> DefinitionService:
    return request.app.state.definition_service


@router.get("/strongs_definition", response_model=StrongsDefinition)
async def get_strongs_definition(
    word: str = Query(..., min_length=1),
    translation: str = Query(..., min_length=1),
    bookName: str = Query(..., min_length=1),
    chapter: int = Query(...),
    verse: int = Query(...),
    service: DefinitionService = Depends(get_definition_service),
):
    """
    Look up the Strong's definition of a word as used in one verse.

    Raises:
        HTTPException: 404 word not found, 502 lexicon site error,
                       500 lexicon site unreachable
    """
    request = DefinitionRequest(
        word=word,
        translation=translation,
        bookName=bookName,
        chapter=chapter,
        verse=verse,
    )
    try:
        return await service.fetch_definition(request)
    except DefinitionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except httpx.HTTPError as e:
        logger.error(f"Lexicon request failed: {e}")
        raise HTTPException(
            status_code=500, detail="Failed to fetch from the lexicon site"
        )
