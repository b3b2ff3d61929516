import logging
from typing import Any
from uuid import UUID

from courtside.core.elo import get_initial_rating, get_skill_bracket, round_half_up
from courtside.exceptions import PlayerNotFoundError, ProfileExistsError, ProfileOwnershipError
from courtside.services.database import DatabaseService

logger = logging.getLogger(__name__)

EDITABLE_PROFILE_FIELDS = (
    "display_name",
    "bio",
    "location",
    "play_style",
    "preferred_position",
    "avatar_url",
)


async def create_player_profile(
    user_id: UUID,
    display_name: str,
    bio: str | None = None,
    location: str | None = None,
    play_style: str | None = None,
    preferred_position: str | None = None,
    avatar_url: str | None = None,
    database: DatabaseService | None = None,
) -> dict[str, Any]:
    """Create the player profile for a user account at the initial rating."""
    if database is None:
        database = DatabaseService()

    existing = await database.get_player_profile_by_user(user_id)
    if existing:
        raise ProfileExistsError(existing["id"])

    profile = await database.create_player_profile({
        "user_id": str(user_id),
        "display_name": display_name,
        "bio": bio,
        "location": location,
        "skill_rating": get_initial_rating(),
        "play_style": play_style,
        "preferred_position": preferred_position,
        "avatar_url": avatar_url,
    })
    logger.info("Created player profile %s for user %s", profile["id"], user_id)
    return profile


async def get_player_profile(
    player_id: UUID, database: DatabaseService | None = None
) -> dict[str, Any]:
    """Get a player's profile, stats and skill bracket."""
    if database is None:
        database = DatabaseService()

    profile = await database.get_player_profile(player_id)
    if not profile:
        raise PlayerNotFoundError("Player not found")

    # Stats only exist once the player has a processed match
    stats = await database.get_player_stats(player_id)

    return {
        "profile": profile,
        "stats": stats,
        "skill_bracket": get_skill_bracket(profile["skill_rating"]),
    }


async def update_player_profile(
    player_id: UUID,
    user_id: UUID,
    fields: dict[str, Any],
    database: DatabaseService | None = None,
) -> dict[str, Any]:
    """Update the owner-editable parts of a profile. Ratings are never editable here."""
    if database is None:
        database = DatabaseService()

    profile = await database.get_player_profile(player_id)
    if not profile:
        raise PlayerNotFoundError("Player not found")
    if profile["user_id"] != str(user_id):
        raise ProfileOwnershipError("Forbidden")

    update_data = {k: v for k, v in fields.items() if k in EDITABLE_PROFILE_FIELDS}
    if not update_data:
        return profile

    return await database.update_player_profile(player_id, update_data)


async def get_player_chemistry(
    player_id: UUID, limit: int = 10, database: DatabaseService | None = None
) -> list[dict[str, Any]]:
    """Get a player's partners ranked by chemistry score."""
    if database is None:
        database = DatabaseService()

    pid = str(player_id)
    records = await database.get_player_chemistry(pid, limit)
    if not records:
        return []

    partner_ids = [r["player2_id"] if r["player1_id"] == pid else r["player1_id"] for r in records]
    profiles = await database.get_player_profiles(partner_ids)
    profiles_dict = {p["id"]: p for p in profiles}

    return [
        {
            "partner": profiles_dict.get(partner_id),
            "chemistry": {
                "matches_together": r["matches_together"],
                "wins_together": r["wins_together"],
                "losses_together": r["losses_together"],
                "win_rate": (
                    round_half_up(r["wins_together"] / r["matches_together"] * 100)
                    if r["matches_together"] > 0 else 0
                ),
                "chemistry_score": r["chemistry_score"],
                "last_played_together": r.get("last_played_together"),
            },
        }
        for r, partner_id in zip(records, partner_ids)
    ]


async def get_player_matches(
    player_id: UUID,
    limit: int = 20,
    offset: int = 0,
    database: DatabaseService | None = None,
) -> list[dict[str, Any]]:
    """Get a player's match history with their side of each result."""
    if database is None:
        database = DatabaseService()

    participants = await database.get_player_participants(player_id)
    participant_ids = {p["id"] for p in participants}
    if not participant_ids:
        return []

    matches = await database.get_participant_matches(sorted(participant_ids), limit, offset)

    enriched = []
    for match in matches:
        is_team1 = match.get("team1_id") in participant_ids
        team_id = match["team1_id"] if is_team1 else match["team2_id"]
        enriched.append({
            **match,
            "player_team": "team1" if is_team1 else "team2",
            "won": match.get("winner_id") == team_id if match.get("winner_id") else None,
            "player_score": match["team1_score"] if is_team1 else match["team2_score"],
            "opponent_score": match["team2_score"] if is_team1 else match["team1_score"],
        })
    return enriched
