"""
ELO rating engine for singles and doubles pickleball.

The standard ELO expectation drives every update:
  E_A = 1 / (1 + 10^((R_B - R_A) / 400))

Both sides move by the same amount in opposite directions:
  magnitude = K * |actual - E_team1| * score_multiplier * upset_multiplier
clamped to [MIN_RATING_CHANGE, MAX_RATING_CHANGE]. Doubles partners share
their team's change; a team's rating is the mean of its players.

Everything here is pure: no I/O and no module state beyond constants.
"""

import math
import statistics
from collections.abc import Sequence

from courtside.models import (
    PlayerRatingChange,
    RatingUpdate,
    Side,
    SkillBracket,
    Volatility,
    Winner,
)

INITIAL_RATING = 1200
K_FACTOR = 32
MIN_RATING_CHANGE = 10
MAX_RATING_CHANGE = 50

# Point gap thresholds (inclusive) and their multipliers
DOMINANT_MARGIN = 8
DOMINANT_MULTIPLIER = 1.5
CLOSE_MARGIN = 2
CLOSE_MULTIPLIER = 1.2

# Pre-match rating gap at which a lower-rated win counts as an upset
UPSET_THRESHOLD = 200
UPSET_MULTIPLIER = 1.5

PERFORMANCE_FALLBACK = 200

VOLATILITY_MIN_SAMPLES = 5
TREND_THRESHOLD = 20

SKILL_BRACKETS = (
    SkillBracket("Beginner", "#9CA3AF", 0, 999),
    SkillBracket("Recreational", "#10B981", 1000, 1199),
    SkillBracket("Intermediate", "#3B82F6", 1200, 1399),
    SkillBracket("Advanced", "#8B5CF6", 1400, 1599),
    SkillBracket("Expert", "#F59E0B", 1600, 1799),
    SkillBracket("Elite", "#EF4444", 1800, 9999),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return math.floor(value + 0.5)


def get_initial_rating() -> int:
    return INITIAL_RATING


def get_team_rating(side: Side) -> float:
    """Mean rating of the side's players."""
    members = side.members
    return sum(m.rating for m in members) / len(members)


def expected_win_probability(rating_a: float, rating_b: float) -> float:
    """Probability that A beats B."""
    return 1 / (1 + math.pow(10, (rating_b - rating_a) / 400))


def score_differential_multiplier(score_a: int, score_b: int) -> float:
    """Blowouts and nail-biters both move ratings more than an ordinary game."""
    differential = abs(score_a - score_b)
    if differential >= DOMINANT_MARGIN:
        return DOMINANT_MULTIPLIER
    if differential <= CLOSE_MARGIN:
        return CLOSE_MULTIPLIER
    return 1.0


def clamp_rating_change(change: float) -> float:
    return max(MIN_RATING_CHANGE, min(MAX_RATING_CHANGE, change))


def calculate_new_ratings(
    team1: Side,
    team2: Side,
    winner: Winner,
    team1_score: int,
    team2_score: int,
) -> RatingUpdate:
    """
    Rate one completed match.

    Args:
        team1: First side (one or two players)
        team2: Second side
        winner: 'team1' or 'team2'; ties are the caller's problem
        team1_score: Points scored by team1
        team2_score: Points scored by team2

    Returns:
        RatingUpdate with every player's new rating and the factors used
    """
    if winner not in ("team1", "team2"):
        raise ValueError(f"winner must be 'team1' or 'team2', got {winner!r}")

    team1_rating = get_team_rating(team1)
    team2_rating = get_team_rating(team2)

    expected = expected_win_probability(team1_rating, team2_rating)
    team1_won = winner == "team1"
    actual = 1 if team1_won else 0

    score_multiplier = score_differential_multiplier(team1_score, team2_score)

    winner_rating, loser_rating = (
        (team1_rating, team2_rating) if team1_won else (team2_rating, team1_rating)
    )
    is_upset = (
        abs(team1_rating - team2_rating) >= UPSET_THRESHOLD
        and winner_rating < loser_rating
    )
    upset_multiplier = UPSET_MULTIPLIER if is_upset else 1.0

    magnitude = clamp_rating_change(
        K_FACTOR * abs(actual - expected) * score_multiplier * upset_multiplier
    )
    # Rounded once so both sides move by the same integer amount
    change = round_half_up(magnitude)
    team1_change = change if team1_won else -change

    return RatingUpdate(
        team1=_apply_change(team1, team1_change),
        team2=_apply_change(team2, -team1_change),
        expected_win_probability=expected,
        score_differential_multiplier=score_multiplier,
        upset_multiplier=upset_multiplier,
        is_upset=is_upset,
        magnitude=magnitude,
    )


def _apply_change(side: Side, change: int) -> list[PlayerRatingChange]:
    return [
        PlayerRatingChange(
            player_id=m.player_id,
            old_rating=m.rating,
            new_rating=round_half_up(m.rating + change),
            change=change,
        )
        for m in side.members
    ]


def get_skill_bracket(rating: float) -> SkillBracket:
    """Classify a rating into one of the six display bands."""
    for bracket in SKILL_BRACKETS[:-1]:
        if rating < bracket.max + 1:
            return bracket
    return SKILL_BRACKETS[-1]


def get_win_probability(rating_a: float, rating_b: float) -> tuple[int, int]:
    """Win chance of each side as whole percentages.

    Each side is rounded independently so the pair can sum to 99 or 101.
    """
    prob_a = expected_win_probability(rating_a, rating_b)
    return round_half_up(prob_a * 100), round_half_up((1 - prob_a) * 100)


def get_performance_rating(
    opponent_rating: float,
    won: bool,
    points_for: int | None = None,
    points_against: int | None = None,
) -> int:
    """
    Rating a single result was "worth".

    With a score, the share of points won is extrapolated logarithmically
    from the opponent's rating. A bare win/loss (or a shutout) has a share of
    exactly 1 or 0, which has no finite logit, so it maps to the opponent's
    rating plus or minus PERFORMANCE_FALLBACK instead.
    """
    if points_for is not None and points_against is not None and points_for + points_against > 0:
        share = points_for / (points_for + points_against)
    else:
        share = 1.0 if won else 0.0

    if share <= 0.0 or share >= 1.0:
        offset = PERFORMANCE_FALLBACK if won else -PERFORMANCE_FALLBACK
        return round_half_up(opponent_rating + offset)

    return round_half_up(opponent_rating + 400 * math.log10(share / (1 - share)))


def calculate_volatility(recent_ratings: Sequence[float]) -> Volatility:
    """
    Consistency and direction of a rating history, oldest first.

    Volatility is the population standard deviation; the trend compares the
    mean of the second half against the first.
    """
    if len(recent_ratings) < VOLATILITY_MIN_SAMPLES:
        return Volatility(volatility=0, trend="stable")

    volatility = statistics.pstdev(recent_ratings)

    half = len(recent_ratings) // 2
    first_avg = statistics.fmean(recent_ratings[:half])
    second_avg = statistics.fmean(recent_ratings[half:])

    trend = "stable"
    if second_avg > first_avg + TREND_THRESHOLD:
        trend = "improving"
    elif second_avg < first_avg - TREND_THRESHOLD:
        trend = "declining"

    return Volatility(volatility=round_half_up(volatility), trend=trend)
