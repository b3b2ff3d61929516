from typing import List, Literal

from pydantic import BaseModel, Field


class WinProbabilityResponse(BaseModel):
    player_a: int
    player_b: int


class PerformanceRatingResponse(BaseModel):
    performance_rating: int


class VolatilityRequest(BaseModel):
    ratings: List[float] = Field(description="Rating history, oldest first")


class VolatilityResponse(BaseModel):
    volatility: int
    trend: Literal["improving", "declining", "stable"]
