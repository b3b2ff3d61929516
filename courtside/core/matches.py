import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from courtside.core.brackets import advance_winner
from courtside.exceptions import MatchNotFoundError, MatchUpdateError
from courtside.services.database import DatabaseService

logger = logging.getLogger(__name__)

MATCH_STATUSES = ("pending", "in_progress", "completed")


def _validate(match: dict[str, Any]) -> None:
    """Check the merged row against the match invariants, filling in an
    omitted winner from the score when completing."""
    status = match.get("status")
    if status not in MATCH_STATUSES:
        raise MatchUpdateError(f"Unknown match status: {status}")

    team1_score = match.get("team1_score") or 0
    team2_score = match.get("team2_score") or 0
    if team1_score < 0 or team2_score < 0:
        raise MatchUpdateError("Scores cannot be negative")

    if status != "completed":
        if match.get("winner_id"):
            raise MatchUpdateError("Only a completed match can have a winner")
        return

    team1_id, team2_id = match.get("team1_id"), match.get("team2_id")
    if not team1_id or not team2_id:
        raise MatchUpdateError("Both teams must be set before a match can be completed")
    if team1_score == team2_score:
        raise MatchUpdateError("A completed match cannot be tied")

    leader_id = team1_id if team1_score > team2_score else team2_id
    if not match.get("winner_id"):
        match["winner_id"] = leader_id
    elif match["winner_id"] not in (team1_id, team2_id):
        raise MatchUpdateError("Winner must be one of the match's teams")
    elif match["winner_id"] != leader_id:
        raise MatchUpdateError("Winner must have the higher score")


async def update_match(
    match_id: UUID | str,
    updates: dict[str, Any],
    database: DatabaseService | None = None,
) -> tuple[dict[str, Any], bool]:
    """
    Apply a score/status update to a match.

    Returns the updated match and whether this update completed it. A
    completing update also advances the winner through the bracket; an
    advancement failure is logged and does not undo the completion. Rating
    processing is left to the caller.
    """
    if database is None:
        database = DatabaseService()

    current = await database.get_match(match_id)
    if not current:
        raise MatchNotFoundError(f"Match {match_id} not found")

    merged = {**current, **updates}

    # Ratings and the bracket have already consumed a completed result
    was_completed = current.get("status") == "completed"
    if was_completed and merged.get("status") != "completed":
        raise MatchUpdateError("A completed match cannot be reopened")

    _validate(merged)

    if was_completed and merged["winner_id"] != current.get("winner_id"):
        raise MatchUpdateError("The winner of a completed match cannot be changed")

    now = datetime.now(timezone.utc).isoformat()
    data = dict(updates)
    data["winner_id"] = merged.get("winner_id")
    data["updated_at"] = now

    newly_completed = merged["status"] == "completed" and current.get("status") != "completed"
    if newly_completed and not merged.get("completed_at"):
        data["completed_at"] = now
    if merged["status"] == "in_progress" and not merged.get("started_at"):
        data["started_at"] = now

    match = await database.update_match(match_id, data)

    if newly_completed:
        logger.info("Match %s completed, winner %s", match_id, match["winner_id"])
        # Completion is already saved; the caller still schedules rating processing
        try:
            await advance_winner(match, database)
        except Exception:
            logger.exception("Failed to advance winner of match %s", match_id)

    return match, newly_completed


async def get_event_matches(
    event_id: UUID | str, database: DatabaseService | None = None
) -> list[dict[str, Any]]:
    """Get an event's matches in bracket order."""
    if database is None:
        database = DatabaseService()

    return await database.get_event_matches(event_id)
