from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from courtside.core import matches as matches_core
from courtside.core.dependencies import get_database_service
from courtside.core.match_results import process_match_result_in_background
from courtside.exceptions import CourtsideError
from courtside.schemas.matches import ErrorResponse, UpdateMatchRequest, UpdateMatchResponse
from courtside.services.database import DatabaseService

router = APIRouter(prefix="/matches", tags=["matches"])


@router.patch(
    "/",
    response_model=UpdateMatchResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_match(
    match_data: UpdateMatchRequest,
    background_tasks: BackgroundTasks,
    database: DatabaseService = Depends(get_database_service)
):
    """Update a match's score or status.

    Completing a match advances its winner through the bracket and schedules
    rating processing after the response is sent; the result of that
    processing never affects this response.
    """
    updates = match_data.model_dump(mode="json", exclude_unset=True, exclude={"id"})
    try:
        match, newly_completed = await matches_core.update_match(
            match_data.id, updates, database=database
        )
    except CourtsideError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update match: {str(e)}") from e

    if newly_completed:
        background_tasks.add_task(process_match_result_in_background, match["id"], database)

    return {"success": True, "match": match}
