"""
Rating, stats and chemistry processing for completed matches.

Runs once per match after its status flips to completed. All deltas are
computed up front from the current stored state, then written either in one
transaction (the apply_match_result RPC) or, for stores without it, as a
claim followed by sequential writes.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, TypeVar
from uuid import UUID

from courtside.core.config import settings
from courtside.core.elo import calculate_new_ratings
from courtside.core.stats import canonical_pair, next_player_stats, next_team_chemistry
from courtside.exceptions import MatchProcessingError
from courtside.models import (
    PlayerRating,
    PlayerStats,
    RatingUpdate,
    TeamChemistry,
    side_from_members,
)
from courtside.services.database import DatabaseService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class MatchResultOutcome:
    match_id: str
    ratings: RatingUpdate
    stats: list[PlayerStats] = field(default_factory=list)
    chemistry: list[TeamChemistry] = field(default_factory=list)


def linked_player_ids(participant: dict[str, Any]) -> list[str]:
    """Player profiles behind a participant: none for walk-ins, two for doubles."""
    ids = []
    for key in ("player_profile_id", "partner_profile_id"):
        player_id = participant.get(key)
        if player_id and str(player_id) not in ids:
            ids.append(str(player_id))
    return ids


async def _step(match_id: str, step: str, awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    except Exception as e:
        logger.error("Match %s: %s failed: %s", match_id, step, e)
        raise MatchProcessingError(match_id, step, str(e)) from e


async def process_match_result(
    match_id: UUID | str,
    database: DatabaseService | None = None,
    atomic: bool | None = None,
) -> MatchResultOutcome | None:
    """
    Apply a completed match to ratings, stats and doubles chemistry.

    Returns None without writing anything when the match isn't completed,
    was already processed, either side has no linked player, or one player is
    linked on both sides.
    """
    if database is None:
        database = DatabaseService()
    if atomic is None:
        atomic = settings.ATOMIC_MATCH_RESULTS

    match_id = str(match_id)
    logger.info("Processing match %s", match_id)

    match = await _step(match_id, "load match", database.get_match(match_id))
    if not match or match.get("status") != "completed":
        logger.info("Match %s not completed, skipping", match_id)
        return None
    if match.get("rating_processed_at"):
        logger.info("Match %s already processed, skipping", match_id)
        return None

    team1_id, team2_id = match.get("team1_id"), match.get("team2_id")
    winner_id = match.get("winner_id")
    if not team1_id or not team2_id:
        logger.info("Match %s is a bye, skipping", match_id)
        return None
    if winner_id not in (team1_id, team2_id):
        logger.warning("Match %s winner %s is not one of its teams, skipping", match_id, winner_id)
        return None

    team1 = await _step(match_id, "load participants", database.get_participant(team1_id))
    team2 = await _step(match_id, "load participants", database.get_participant(team2_id))
    if not team1 or not team2:
        logger.info("Match %s participants not found, skipping", match_id)
        return None

    team1_ids = linked_player_ids(team1)
    team2_ids = linked_player_ids(team2)
    if not team1_ids or not team2_ids:
        logger.info("Match %s needs a linked player on both sides, skipping rating update", match_id)
        return None
    shared = set(team1_ids) & set(team2_ids)
    if shared:
        logger.warning("Match %s has players on both sides (%s), skipping", match_id, ", ".join(sorted(shared)))
        return None

    ratings = await _step(match_id, "load ratings", database.get_player_ratings(team1_ids + team2_ids))
    team1_members = [PlayerRating(pid, ratings[pid]) for pid in team1_ids if pid in ratings]
    team2_members = [PlayerRating(pid, ratings[pid]) for pid in team2_ids if pid in ratings]
    if not team1_members or not team2_members:
        logger.info("Match %s has no player profiles on one side, skipping", match_id)
        return None

    team1_score = int(match.get("team1_score") or 0)
    team2_score = int(match.get("team2_score") or 0)
    team1_won = winner_id == team1_id

    rating_update = calculate_new_ratings(
        side_from_members(team1_members),
        side_from_members(team2_members),
        "team1" if team1_won else "team2",
        team1_score,
        team2_score,
    )

    played_at = datetime.now(timezone.utc)
    sides = (
        (team1_members, team1_won, team1_score, team2_score),
        (team2_members, not team1_won, team2_score, team1_score),
    )

    outcome = MatchResultOutcome(match_id=match_id, ratings=rating_update)
    for members, won, points_for, points_against in sides:
        for member in members:
            row = await _step(match_id, "load stats", database.get_player_stats(member.player_id))
            current = PlayerStats.model_validate(row) if row else None
            outcome.stats.append(
                next_player_stats(current, member.player_id, won, points_for, points_against, played_at)
            )

        if len(members) == 2:
            player1_id, player2_id = canonical_pair(members[0].player_id, members[1].player_id)
            row = await _step(match_id, "load chemistry", database.get_team_chemistry(player1_id, player2_id))
            current = TeamChemistry.model_validate(row) if row else None
            outcome.chemistry.append(next_team_chemistry(current, player1_id, player2_id, won, played_at))

    if atomic:
        applied = await _apply_atomic(database, outcome)
    else:
        applied = await _apply_sequential(database, outcome)

    if not applied:
        logger.info("Match %s was processed concurrently, skipping", match_id)
        return None

    for change in rating_update.team1 + rating_update.team2:
        logger.info(
            "Updated rating for player %s: %s -> %s", change.player_id, change.old_rating, change.new_rating
        )
    logger.info(
        "Successfully processed match %s (expected=%.3f, score x%.1f, upset x%.1f)",
        match_id,
        rating_update.expected_win_probability,
        rating_update.score_differential_multiplier,
        rating_update.upset_multiplier,
    )
    return outcome


async def _apply_atomic(database: DatabaseService, outcome: MatchResultOutcome) -> bool:
    ratings = [
        {"player_id": c.player_id, "skill_rating": c.new_rating}
        for c in outcome.ratings.team1 + outcome.ratings.team2
    ]
    return await _step(
        outcome.match_id,
        "apply result",
        database.apply_match_result(
            outcome.match_id,
            ratings,
            [s.model_dump(mode="json") for s in outcome.stats],
            [c.model_dump(mode="json") for c in outcome.chemistry],
        ),
    )


async def _apply_sequential(database: DatabaseService, outcome: MatchResultOutcome) -> bool:
    # A failure part-way leaves earlier writes committed; the claim is not
    # released, so the match will not be reprocessed automatically.
    match_id = outcome.match_id
    if not await _step(match_id, "claim match", database.claim_match_result(match_id)):
        return False

    for change in outcome.ratings.team1 + outcome.ratings.team2:
        await _step(match_id, "update rating", database.update_player_rating(change.player_id, change.new_rating))
    for stats in outcome.stats:
        await _step(
            match_id, "update stats", database.upsert_player_stats(stats.player_id, stats.model_dump(mode="json"))
        )
    for chemistry in outcome.chemistry:
        await _step(match_id, "update chemistry", database.upsert_team_chemistry(chemistry.model_dump(mode="json")))
    return True


async def process_match_result_in_background(
    match_id: UUID | str, database: DatabaseService | None = None
) -> None:
    """Fire-and-forget wrapper: failures are logged, never raised to the caller."""
    try:
        await process_match_result(match_id, database=database)
    except Exception:
        logger.exception("Failed to process match result %s", match_id)
