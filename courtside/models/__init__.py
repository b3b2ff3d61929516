from .rating import (
    Doubles,
    PlayerRating,
    PlayerRatingChange,
    RatingUpdate,
    Side,
    Singles,
    SkillBracket,
    Volatility,
    Winner,
    side_from_members,
)
from .stats import PlayerStats, TeamChemistry

__all__ = [
    'Doubles',
    'PlayerRating',
    'PlayerRatingChange',
    'PlayerStats',
    'RatingUpdate',
    'Side',
    'Singles',
    'SkillBracket',
    'TeamChemistry',
    'Volatility',
    'Winner',
    'side_from_members',
]
