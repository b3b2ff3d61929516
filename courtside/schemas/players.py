from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

PlayStyle = Literal["aggressive", "defensive", "balanced"]
Position = Literal["left", "right", "any"]


class CreatePlayerRequest(BaseModel):
    user_id: UUID
    display_name: str = Field(min_length=1, max_length=50)
    bio: Optional[str] = None
    location: Optional[str] = None
    play_style: Optional[PlayStyle] = None
    preferred_position: Optional[Position] = None
    avatar_url: Optional[str] = None


class UpdatePlayerRequest(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    bio: Optional[str] = None
    location: Optional[str] = None
    play_style: Optional[PlayStyle] = None
    preferred_position: Optional[Position] = None
    avatar_url: Optional[str] = None


class PlayerProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    display_name: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    skill_rating: int
    play_style: Optional[PlayStyle] = None
    preferred_position: Optional[Position] = None


class PlayerStatsResponse(BaseModel):
    matches_played: int
    matches_won: int
    matches_lost: int
    points_scored: int
    points_against: int
    current_win_streak: int
    best_win_streak: int
    current_loss_streak: int
    avg_point_differential: float
    last_played_at: Optional[datetime] = None


class SkillBracketResponse(BaseModel):
    label: str
    color: str
    min: int
    max: int


class CreatePlayerResponse(BaseModel):
    profile: PlayerProfileResponse
    message: str


class PlayerDetailResponse(BaseModel):
    profile: PlayerProfileResponse
    stats: Optional[PlayerStatsResponse] = None
    skill_bracket: SkillBracketResponse


class PartnerProfile(BaseModel):
    id: UUID
    display_name: str
    avatar_url: Optional[str] = None
    skill_rating: int


class ChemistryRecord(BaseModel):
    matches_together: int
    wins_together: int
    losses_together: int
    win_rate: int
    chemistry_score: int
    last_played_together: Optional[datetime] = None


class PartnerChemistry(BaseModel):
    partner: Optional[PartnerProfile] = None
    chemistry: ChemistryRecord


class PlayerChemistryResponse(BaseModel):
    partners: List[PartnerChemistry]
