from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
import os
from supabase import create_client, Client
from uuid import UUID


def _first(response) -> Optional[Dict[str, Any]]:
    return response.data[0] if response.data else None


class DatabaseService:
    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        """Initialize the database service with Supabase credentials."""
        # Match processing and reseeding write across players, so the
        # service role key is preferred over the anon key.
        self.url = url or os.getenv("SUPABASE_URL")
        self.key = key or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")

        if not self.url or not self.key:
            raise ValueError("Supabase URL and key must be provided or set in environment variables")
        self.client: Client = create_client(self.url, self.key)

    # Player profile operations
    async def get_player_profile(self, player_id: UUID | str) -> Optional[Dict[str, Any]]:
        """Get a player profile by id."""
        response = self.client.table("player_profiles").select("*").eq("id", str(player_id)).limit(1).execute()
        return _first(response)

    async def get_player_profile_by_user(self, user_id: UUID | str) -> Optional[Dict[str, Any]]:
        """Get the player profile owned by a user account."""
        response = self.client.table("player_profiles").select("*").eq("user_id", str(user_id)).limit(1).execute()
        return _first(response)

    async def get_player_profiles(self, player_ids: List[str]) -> List[Dict[str, Any]]:
        """Get profiles for multiple player ids."""
        if not player_ids:
            return []
        response = self.client.table("player_profiles").select("*").in_("id", [str(p) for p in player_ids]).execute()
        return response.data

    async def create_player_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new player profile."""
        response = self.client.table("player_profiles").insert(data).execute()
        return response.data[0]

    async def update_player_profile(self, player_id: UUID | str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Update a player profile."""
        response = self.client.table("player_profiles").update(data).eq("id", str(player_id)).execute()
        return response.data[0]

    # Rating operations
    async def get_player_ratings(self, player_ids: List[str]) -> Dict[str, int]:
        """Get current skill ratings keyed by player id. Unknown ids are absent."""
        if not player_ids:
            return {}
        response = self.client.table("player_profiles").select("id, skill_rating").in_("id", player_ids).execute()
        return {row["id"]: int(row["skill_rating"]) for row in response.data}

    async def update_player_rating(self, player_id: str, rating: int) -> Dict[str, Any]:
        """Set a player's skill rating."""
        data = {
            "skill_rating": rating,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        response = self.client.table("player_profiles").update(data).eq("id", player_id).execute()
        return response.data[0]

    # Stats operations
    async def get_player_stats(self, player_id: UUID | str) -> Optional[Dict[str, Any]]:
        """Get a player's running stats, or None before their first match."""
        response = self.client.table("player_stats").select("*").eq("player_id", str(player_id)).limit(1).execute()
        return _first(response)

    async def upsert_player_stats(self, player_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace a player's stats row."""
        response = self.client.table("player_stats").upsert(
            {**data, "player_id": player_id}, on_conflict="player_id"
        ).execute()
        return response.data[0]

    # Chemistry operations
    async def get_team_chemistry(self, player1_id: str, player2_id: str) -> Optional[Dict[str, Any]]:
        """Get a partnership record.

        Note: Rows are stored with player1_id < player2_id; callers pass the
        canonical pair.
        """
        response = (
            self.client.table("team_chemistry")
            .select("*")
            .eq("player1_id", player1_id)
            .eq("player2_id", player2_id)
            .limit(1)
            .execute()
        )
        return _first(response)

    async def upsert_team_chemistry(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace a partnership record keyed by the canonical pair."""
        response = self.client.table("team_chemistry").upsert(data, on_conflict="player1_id,player2_id").execute()
        return response.data[0]

    async def get_player_chemistry(self, player_id: UUID | str, limit: int = 10) -> List[Dict[str, Any]]:
        """Get a player's partnerships, best chemistry first."""
        pid = str(player_id)
        response = (
            self.client.table("team_chemistry")
            .select("*")
            .or_(f"player1_id.eq.{pid},player2_id.eq.{pid}")
            .order("chemistry_score", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data

    # Participant operations
    async def get_participant(self, participant_id: UUID | str) -> Optional[Dict[str, Any]]:
        """Get a participant (team) by id."""
        response = self.client.table("participants").select("*").eq("id", str(participant_id)).limit(1).execute()
        return _first(response)

    async def get_event_participants(self, event_id: UUID | str) -> List[Dict[str, Any]]:
        """Get an event's participants in check-in order."""
        response = (
            self.client.table("participants")
            .select("*")
            .eq("event_id", str(event_id))
            .order("created_at", desc=False)
            .execute()
        )
        return response.data

    async def get_player_participants(self, player_id: UUID | str) -> List[Dict[str, Any]]:
        """Get every participant a player is linked to."""
        pid = str(player_id)
        response = (
            self.client.table("participants")
            .select("*")
            .or_(f"player_profile_id.eq.{pid},partner_profile_id.eq.{pid}")
            .execute()
        )
        return response.data

    # Match operations
    async def get_match(self, match_id: UUID | str) -> Optional[Dict[str, Any]]:
        """Get a match by id."""
        response = self.client.table("matches").select("*").eq("id", str(match_id)).limit(1).execute()
        return _first(response)

    async def update_match(self, match_id: UUID | str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Update a match."""
        response = self.client.table("matches").update(data).eq("id", str(match_id)).execute()
        return response.data[0]

    async def get_event_matches(self, event_id: UUID | str) -> List[Dict[str, Any]]:
        """Get an event's matches in bracket order."""
        response = (
            self.client.table("matches")
            .select("*")
            .eq("event_id", str(event_id))
            .order("round_number", desc=False)
            .order("match_number", desc=False)
            .execute()
        )
        return response.data

    async def has_completed_matches(self, event_id: UUID | str) -> bool:
        """Whether any match of the event has been completed."""
        response = (
            self.client.table("matches")
            .select("id")
            .eq("event_id", str(event_id))
            .eq("status", "completed")
            .limit(1)
            .execute()
        )
        return bool(response.data)

    async def delete_event_matches(self, event_id: UUID | str) -> None:
        """Delete every match of an event."""
        self.client.table("matches").delete().eq("event_id", str(event_id)).execute()

    async def insert_matches(self, matches: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert a batch of matches in one write."""
        if not matches:
            return []
        response = self.client.table("matches").insert(matches).execute()
        return response.data

    async def get_participant_matches(
        self, participant_ids: List[str], limit: int = 20, offset: int = 0
    ) -> List[Dict[str, Any]]:
        """Get matches involving any of the participants, newest first."""
        if not participant_ids:
            return []
        ids = ",".join(participant_ids)
        response = (
            self.client.table("matches")
            .select("*")
            .or_(f"team1_id.in.({ids}),team2_id.in.({ids})")
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return response.data

    # Match result bookkeeping
    async def claim_match_result(self, match_id: str) -> bool:
        """Mark a completed match as rating-processed.

        The update only matches while rating_processed_at is still null, so
        exactly one caller gets True for a given match.
        """
        response = (
            self.client.table("matches")
            .update({"rating_processed_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", match_id)
            .eq("status", "completed")
            .is_("rating_processed_at", "null")
            .execute()
        )
        return bool(response.data)

    async def apply_match_result(
        self,
        match_id: str,
        ratings: List[Dict[str, Any]],
        stats: List[Dict[str, Any]],
        chemistry: List[Dict[str, Any]],
    ) -> bool:
        """Claim the match and write all of its rating, stats and chemistry
        rows in one transaction (see the apply_match_result SQL function).

        Returns False when the match had already been processed.
        """
        response = self.client.rpc(
            "apply_match_result",
            {
                "p_match_id": match_id,
                "p_ratings": ratings,
                "p_stats": stats,
                "p_chemistry": chemistry,
            },
        ).execute()
        return bool(response.data)
