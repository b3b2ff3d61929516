"""
Single-elimination bracket seeding and winner advancement.

Round ``r`` match ``k`` feeds round ``r + 1`` match ``ceil(k / 2)``: odd
``k`` fills the team1 slot, even ``k`` the team2 slot. When a round has an odd
number of matches its last match is the only feeder of its downstream match,
which is then a walkover.
"""

import logging
import math
import random
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from courtside.exceptions import InsufficientParticipantsError, ReseedGuardError
from courtside.services.database import DatabaseService

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def count_rounds(participant_count: int) -> int:
    return math.ceil(math.log2(participant_count))


def build_first_round(event_id: str, participant_ids: list[str]) -> list[dict[str, Any]]:
    """Pair consecutive participants; an odd one out gets a completed bye."""
    now = _now()
    matches = []
    for match_number, i in enumerate(range(0, len(participant_ids), 2), start=1):
        team1_id = participant_ids[i]
        team2_id = participant_ids[i + 1] if i + 1 < len(participant_ids) else None
        is_bye = team2_id is None
        matches.append({
            "event_id": event_id,
            "round_number": 1,
            "match_number": match_number,
            "court_number": match_number,
            "team1_id": team1_id,
            "team2_id": team2_id,
            "team1_score": 0,
            "team2_score": 0,
            "winner_id": team1_id if is_bye else None,
            "status": "completed" if is_bye else "pending",
            "completed_at": now if is_bye else None,
            "created_at": now,
            "updated_at": now,
        })
    return matches


def build_placeholder_rounds(event_id: str, first_round_count: int, total_rounds: int) -> list[dict[str, Any]]:
    """Empty pending matches for rounds 2..total_rounds."""
    now = _now()
    matches = []
    previous_round_count = first_round_count
    for round_number in range(2, total_rounds + 1):
        this_round_count = math.ceil(previous_round_count / 2)
        for match_number in range(1, this_round_count + 1):
            matches.append({
                "event_id": event_id,
                "round_number": round_number,
                "match_number": match_number,
                "court_number": match_number,
                "team1_id": None,
                "team2_id": None,
                "team1_score": 0,
                "team2_score": 0,
                "winner_id": None,
                "status": "pending",
                "created_at": now,
                "updated_at": now,
            })
        previous_round_count = this_round_count
    return matches


async def reseed_bracket(
    event_id: UUID | str,
    database: DatabaseService | None = None,
    rng: random.Random | None = None,
) -> dict[str, int]:
    """
    Replace an event's matches with a freshly shuffled bracket.

    Raises ReseedGuardError once any match has been completed and
    InsufficientParticipantsError below two participants; neither writes.
    """
    if database is None:
        database = DatabaseService()
    if rng is None:
        rng = random.Random()

    event_id = str(event_id)

    if await database.has_completed_matches(event_id):
        raise ReseedGuardError("Cannot reseed bracket: matches have already been completed")

    participants = await database.get_event_participants(event_id)
    if len(participants) < 2:
        raise InsufficientParticipantsError("Not enough participants to create bracket")

    await database.delete_event_matches(event_id)

    participant_ids = [p["id"] for p in participants]
    rng.shuffle(participant_ids)

    total_rounds = count_rounds(len(participant_ids))
    first_round = build_first_round(event_id, participant_ids)
    placeholders = build_placeholder_rounds(event_id, len(first_round), total_rounds)

    inserted = await database.insert_matches(first_round)
    await database.insert_matches(placeholders)

    for match in inserted:
        if match["status"] == "completed":
            await advance_winner(match, database)

    logger.info(
        "Reseeded event %s: %s participants, %s rounds, %s matches",
        event_id, len(participant_ids), total_rounds, len(first_round) + len(placeholders),
    )
    return {
        "participants": len(participant_ids),
        "rounds": total_rounds,
        "matches": len(first_round) + len(placeholders),
    }


async def advance_winner(
    match: dict[str, Any], database: DatabaseService | None = None
) -> dict[str, Any] | None:
    """
    Move a completed match's winner into its downstream slot.

    Returns the updated downstream match, or None when there is nothing to
    advance into (final round, missing or already-completed target).
    """
    if database is None:
        database = DatabaseService()

    winner_id = match.get("winner_id")
    if match.get("status") != "completed" or not winner_id:
        return None

    event_matches = await database.get_event_matches(match["event_id"])
    round_number = match["round_number"]
    match_number = match["match_number"]

    current_round = [m for m in event_matches if m["round_number"] == round_number]
    next_round = {m["match_number"]: m for m in event_matches if m["round_number"] == round_number + 1}
    if not next_round:
        logger.info("Match %s is the final, winner %s", match.get("id"), winner_id)
        return None

    target = next_round.get((match_number + 1) // 2)
    if target is None:
        logger.warning("No downstream match for round %s match %s", round_number, match_number)
        return None
    if target["status"] == "completed":
        logger.warning("Downstream match %s already completed, not advancing %s", target["id"], winner_id)
        return None

    slot = "team1_id" if match_number % 2 == 1 else "team2_id"
    updates: dict[str, Any] = {slot: winner_id, "updated_at": _now()}

    sibling_number = match_number + 1 if match_number % 2 == 1 else match_number - 1
    is_walkover = sibling_number > len(current_round)
    if is_walkover:
        updates.update({"winner_id": winner_id, "status": "completed", "completed_at": _now()})

    updated = await database.update_match(target["id"], updates)
    logger.info("Advanced %s to round %s match %s", winner_id, round_number + 1, target["match_number"])

    if is_walkover:
        await advance_winner(updated, database)
    return updated
