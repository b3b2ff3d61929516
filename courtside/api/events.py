from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from courtside.core import brackets as brackets_core
from courtside.core import matches as matches_core
from courtside.core.dependencies import get_database_service
from courtside.exceptions import CourtsideError
from courtside.schemas.matches import ErrorResponse, EventMatchesResponse, ReseedResponse
from courtside.services.database import DatabaseService

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/{event_id}/matches", response_model=EventMatchesResponse)
async def get_event_matches(
    event_id: UUID,
    database: DatabaseService = Depends(get_database_service)
):
    """Get the event's bracket, round by round."""
    try:
        matches = await matches_core.get_event_matches(event_id, database=database)
        return {"matches": matches}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unable to load matches: {str(e)}") from e


@router.post(
    "/{event_id}/reseed",
    response_model=ReseedResponse,
    responses={400: {"model": ErrorResponse}},
)
async def reseed_bracket(
    event_id: UUID,
    database: DatabaseService = Depends(get_database_service)
):
    """Regenerate the event's bracket from its current participants."""
    try:
        result = await brackets_core.reseed_bracket(event_id, database=database)
    except CourtsideError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to reseed bracket: {str(e)}") from e

    return {"success": True, "message": "Bracket reseeded successfully", **result}
