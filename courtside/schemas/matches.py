from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class UpdateMatchRequest(BaseModel):
    id: UUID
    team1_score: Optional[int] = Field(default=None, ge=0)
    team2_score: Optional[int] = Field(default=None, ge=0)
    status: Optional[Literal["pending", "in_progress", "completed"]] = None
    winner_id: Optional[UUID] = None
    court_number: Optional[int] = None


class MatchResponse(BaseModel):
    id: UUID
    event_id: UUID
    round_number: int
    match_number: int
    court_number: Optional[int] = None
    team1_id: Optional[UUID] = None
    team2_id: Optional[UUID] = None
    team1_score: int
    team2_score: int
    winner_id: Optional[UUID] = None
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class UpdateMatchResponse(BaseModel):
    success: bool
    match: MatchResponse


class EventMatchesResponse(BaseModel):
    matches: List[MatchResponse]


class ReseedResponse(BaseModel):
    success: bool
    message: str
    participants: int
    rounds: int
    matches: int


class PlayerMatchResponse(MatchResponse):
    player_team: Literal["team1", "team2"]
    won: Optional[bool] = None
    player_score: int
    opponent_score: int


class PlayerMatchesResponse(BaseModel):
    matches: List[PlayerMatchResponse]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
