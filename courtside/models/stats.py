from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PlayerStats(BaseModel):
    """Running totals for one player, one row per player in ``player_stats``."""

    model_config = ConfigDict(extra="ignore")

    player_id: str
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    points_scored: int = 0
    points_against: int = 0
    current_win_streak: int = 0
    best_win_streak: int = 0
    current_loss_streak: int = 0
    avg_point_differential: float = 0.0
    last_played_at: datetime | None = None


class TeamChemistry(BaseModel):
    """Partnership record for one unordered pair, ``player1_id < player2_id``."""

    model_config = ConfigDict(extra="ignore")

    player1_id: str
    player2_id: str
    matches_together: int = 0
    wins_together: int = 0
    losses_together: int = 0
    chemistry_score: int = 50
    last_played_together: datetime | None = None
