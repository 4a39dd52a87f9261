import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from ..models.annotations import Annotation
from ..services.annotations_service import AnnotationsService
from ..services.errors import AnnotationConflictError, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/highlights", tags=["highlights"])


def get_annotations_service(request: Request) -> AnnotationsService:
    return request.app.state.annotations_service


@router.get(
    "", response_model=List[Annotation], response_model_exclude_none=True
)
async def list_highlights(
    translation: str = Query(..., min_length=1),
    bookId: int = Query(...),
    chapter: int = Query(...),
    service: AnnotationsService = Depends(get_annotations_service),
):
    """
    Get every highlight and note for one chapter of one translation.

    Returns:
        List[Annotation]: Annotations in creation order, possibly empty
    """
    try:
        return service.list_annotations(translation, bookId, chapter)
    except StorageError as e:
        raise HTTPException(
            status_code=500, detail=f"Error retrieving highlights: {str(e)}"
        )


@router.post(
    "",
    status_code=201,
    response_model=Annotation,
    response_model_exclude_none=True,
)
async def create_highlight(
    annotation: Annotation,
    service: AnnotationsService = Depends(get_annotations_service),
):
    """
    Store a new highlight or note.

    Args:
        annotation: The annotation with its client-generated id

    Returns:
        Annotation: The stored annotation

    Raises:
        HTTPException: 409 if the id is already taken, 500 on storage failure
    """
    try:
        return service.insert_annotation(annotation)
    except AnnotationConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise HTTPException(
            status_code=500, detail=f"Error creating highlight: {str(e)}"
        )


@router.delete("/delete/{annotation_id}", status_code=204)
async def delete_highlight(
    annotation_id: str,
    service: AnnotationsService = Depends(get_annotations_service),
):
    """
    Delete a highlight or note by id.

    Raises:
        HTTPException: 404 if no row had the id, 500 on storage failure
    """
    try:
        deleted = service.delete_annotation(annotation_id)
    except StorageError as e:
        raise HTTPException(
            status_code=500, detail=f"Error deleting highlight: {str(e)}"
        )

    if not deleted:
        raise HTTPException(status_code=404, detail="Highlight not found")
    return Response(status_code=204)
