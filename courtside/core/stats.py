"""
Incremental player statistics and doubles chemistry.

Both aggregators take the current snapshot (or None for a first match) and one
match outcome, and return the next snapshot. They never recompute from match
history, so each match must be fed in exactly once.
"""

from datetime import datetime, timezone

from courtside.core.elo import round_half_up
from courtside.models import PlayerStats, TeamChemistry

CHEMISTRY_WIN_RATE_WEIGHT = 0.7
CHEMISTRY_MATCH_BONUS = 2
CHEMISTRY_MAX_MATCH_BONUS = 20
CHEMISTRY_MAX_SCORE = 100


def next_player_stats(
    current: PlayerStats | None,
    player_id: str,
    won: bool,
    points_scored: int,
    points_against: int,
    played_at: datetime | None = None,
) -> PlayerStats:
    """Fold one match into a player's running totals."""
    if current is None:
        current = PlayerStats(player_id=player_id)

    matches_played = current.matches_played + 1
    total_scored = current.points_scored + points_scored
    total_against = current.points_against + points_against
    current_win_streak = current.current_win_streak + 1 if won else 0

    return PlayerStats(
        player_id=player_id,
        matches_played=matches_played,
        matches_won=current.matches_won + (1 if won else 0),
        matches_lost=current.matches_lost + (0 if won else 1),
        points_scored=total_scored,
        points_against=total_against,
        current_win_streak=current_win_streak,
        best_win_streak=max(current.best_win_streak, current_win_streak),
        current_loss_streak=0 if won else current.current_loss_streak + 1,
        # Recomputed from totals, not a running mean of per-match differentials
        avg_point_differential=(total_scored - total_against) / matches_played,
        last_played_at=played_at or datetime.now(timezone.utc),
    )


def canonical_pair(player_a: str, player_b: str) -> tuple[str, str]:
    """Order a partnership so the smaller id comes first."""
    if player_a == player_b:
        raise ValueError("A partnership needs two different players")
    return (player_a, player_b) if player_a < player_b else (player_b, player_a)


def chemistry_score(matches_together: int, wins_together: int) -> int:
    """0-100 score from win rate (70% weight) plus up to 20 for experience."""
    if matches_together == 0:
        return TeamChemistry.model_fields["chemistry_score"].default
    win_rate = wins_together / matches_together * 100
    matches_bonus = min(matches_together * CHEMISTRY_MATCH_BONUS, CHEMISTRY_MAX_MATCH_BONUS)
    return min(round_half_up(win_rate * CHEMISTRY_WIN_RATE_WEIGHT + matches_bonus), CHEMISTRY_MAX_SCORE)


def next_team_chemistry(
    current: TeamChemistry | None,
    player_a: str,
    player_b: str,
    won: bool,
    played_at: datetime | None = None,
) -> TeamChemistry:
    """Fold one shared doubles match into the pair's partnership record."""
    player1_id, player2_id = canonical_pair(player_a, player_b)
    if current is None:
        current = TeamChemistry(player1_id=player1_id, player2_id=player2_id)

    matches_together = current.matches_together + 1
    wins_together = current.wins_together + (1 if won else 0)

    return TeamChemistry(
        player1_id=player1_id,
        player2_id=player2_id,
        matches_together=matches_together,
        wins_together=wins_together,
        losses_together=current.losses_together + (0 if won else 1),
        chemistry_score=chemistry_score(matches_together, wins_together),
        last_played_together=played_at or datetime.now(timezone.utc),
    )
