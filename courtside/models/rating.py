"""
Value types exchanged with the rating engine.

A match side is either ``Singles`` or ``Doubles``; everything that needs the
side's players (team rating, applying deltas, stats fan-out) goes through
``members`` so the two shapes are handled the same way.
"""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class PlayerRating:
    player_id: str
    rating: int


@dataclass(frozen=True)
class Singles:
    player: PlayerRating

    @property
    def members(self) -> tuple[PlayerRating, ...]:
        return (self.player,)


@dataclass(frozen=True)
class Doubles:
    player1: PlayerRating
    player2: PlayerRating

    @property
    def members(self) -> tuple[PlayerRating, ...]:
        return (self.player1, self.player2)


Side = Singles | Doubles

Winner = Literal["team1", "team2"]


def side_from_members(members: list[PlayerRating]) -> Side:
    """Build the side variant for one or two rated players."""
    if len(members) == 1:
        return Singles(members[0])
    if len(members) == 2:
        return Doubles(members[0], members[1])
    raise ValueError(f"A side has one or two players, got {len(members)}")


@dataclass(frozen=True)
class PlayerRatingChange:
    player_id: str
    old_rating: int
    new_rating: int
    change: int


@dataclass
class RatingUpdate:
    """
    Result of rating one match.

    Only the per-player changes are persisted; the multipliers and
    probability are kept so the processor can log how the change came about.
    """
    team1: list[PlayerRatingChange]
    team2: list[PlayerRatingChange]

    # Expected probability that team1 wins, before the match
    expected_win_probability: float
    score_differential_multiplier: float
    upset_multiplier: float
    is_upset: bool

    # Clamped magnitude before rounding
    magnitude: float

    changes: dict[str, PlayerRatingChange] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.changes = {c.player_id: c for c in self.team1 + self.team2}


@dataclass(frozen=True)
class SkillBracket:
    label: str
    color: str
    min: int
    max: int


@dataclass(frozen=True)
class Volatility:
    volatility: int
    trend: Literal["improving", "declining", "stable"]
