from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from courtside.core import players as players_core
from courtside.core.dependencies import get_database_service
from courtside.exceptions import CourtsideError
from courtside.schemas.matches import PlayerMatchesResponse
from courtside.schemas.players import (
    CreatePlayerRequest,
    CreatePlayerResponse,
    PlayerChemistryResponse,
    PlayerDetailResponse,
    PlayerProfileResponse,
    UpdatePlayerRequest,
)
from courtside.services.database import DatabaseService

router = APIRouter(prefix="/players", tags=["players"])


@router.post("/", response_model=CreatePlayerResponse)
async def create_player(
    player_data: CreatePlayerRequest,
    database: DatabaseService = Depends(get_database_service)
):
    """Create the player profile for a user account."""
    try:
        profile = await players_core.create_player_profile(
            user_id=player_data.user_id,
            display_name=player_data.display_name,
            bio=player_data.bio,
            location=player_data.location,
            play_style=player_data.play_style,
            preferred_position=player_data.preferred_position,
            avatar_url=player_data.avatar_url,
            database=database,
        )
    except CourtsideError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create profile: {str(e)}") from e

    return {"profile": profile, "message": "Profile created successfully"}


@router.get("/{player_id}", response_model=PlayerDetailResponse)
async def get_player(
    player_id: UUID,
    database: DatabaseService = Depends(get_database_service)
):
    """Get a player's profile with stats and skill bracket."""
    try:
        player = await players_core.get_player_profile(player_id, database=database)
    except CourtsideError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return {**player, "skill_bracket": asdict(player["skill_bracket"])}


@router.patch("/{player_id}", response_model=PlayerProfileResponse)
async def update_player(
    player_id: UUID,
    profile_data: UpdatePlayerRequest,
    user_id: UUID = Query(..., description="User ID of the profile owner"),
    database: DatabaseService = Depends(get_database_service)
):
    """Update a player's own profile."""
    try:
        return await players_core.update_player_profile(
            player_id,
            user_id,
            profile_data.model_dump(exclude_unset=True),
            database=database,
        )
    except CourtsideError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {str(e)}") from e


@router.get("/{player_id}/chemistry", response_model=PlayerChemistryResponse)
async def get_player_chemistry(
    player_id: UUID,
    limit: int = Query(10, ge=1, le=50),
    database: DatabaseService = Depends(get_database_service)
):
    """Get a player's best partnerships."""
    try:
        partners = await players_core.get_player_chemistry(player_id, limit, database=database)
        return {"partners": partners}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch chemistry: {str(e)}") from e


@router.get("/{player_id}/matches", response_model=PlayerMatchesResponse)
async def get_player_matches(
    player_id: UUID,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    database: DatabaseService = Depends(get_database_service)
):
    """Get a player's match history, newest first."""
    try:
        matches = await players_core.get_player_matches(player_id, limit, offset, database=database)
        return {"matches": matches}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch matches: {str(e)}") from e
