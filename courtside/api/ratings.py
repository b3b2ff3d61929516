from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Query

from courtside.core import elo
from courtside.schemas.players import SkillBracketResponse
from courtside.schemas.ratings import (
    PerformanceRatingResponse,
    VolatilityRequest,
    VolatilityResponse,
    WinProbabilityResponse,
)

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.get("/win-probability", response_model=WinProbabilityResponse)
async def get_win_probability(
    rating_a: float = Query(..., description="Rating of side A (team average for doubles)"),
    rating_b: float = Query(..., description="Rating of side B"),
):
    """Pre-match win chances as percentages."""
    player_a, player_b = elo.get_win_probability(rating_a, rating_b)
    return {"player_a": player_a, "player_b": player_b}


@router.get("/skill-bracket/{rating}", response_model=SkillBracketResponse)
async def get_skill_bracket(rating: int):
    return asdict(elo.get_skill_bracket(rating))


@router.get("/performance", response_model=PerformanceRatingResponse)
async def get_performance_rating(
    opponent_rating: float,
    won: bool,
    points_for: Optional[int] = Query(None, ge=0),
    points_against: Optional[int] = Query(None, ge=0),
):
    """Rating a single result was worth against the given opponent."""
    return {
        "performance_rating": elo.get_performance_rating(
            opponent_rating, won, points_for, points_against
        )
    }


@router.post("/volatility", response_model=VolatilityResponse)
async def get_volatility(history: VolatilityRequest):
    """Consistency and trend of a rating history."""
    return asdict(elo.calculate_volatility(history.ratings))
