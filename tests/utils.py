"""
Shared test utilities and helpers for the Courtside test suite.

``InMemoryDatabaseService`` implements the DatabaseService surface over plain
dicts so the core and the API can be exercised without a Supabase project.
Set ``fail_on`` to make a named method raise, to simulate a store failure.
"""

import copy
import itertools
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)

# Common test constants
DEFAULT_INITIAL_RATING = 1200
EVENT_CREATED_AT = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class StoreError(RuntimeError):
    pass


class InMemoryDatabaseService:
    def __init__(self):
        self.player_profiles: Dict[str, Dict[str, Any]] = {}
        self.player_stats: Dict[str, Dict[str, Any]] = {}
        self.team_chemistry: Dict[tuple, Dict[str, Any]] = {}
        self.participants: Dict[str, Dict[str, Any]] = {}
        self.matches: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.fail_on: set = set()
        self._tick = itertools.count()

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise StoreError(f"{name} failed")

    def _timestamp(self) -> str:
        return (EVENT_CREATED_AT + timedelta(seconds=next(self._tick))).isoformat()

    def writes(self) -> List[str]:
        """Names of the write calls made so far, in order."""
        prefixes = ("create_", "update_", "upsert_", "insert_", "delete_", "claim_", "apply_")
        return [c for c in self.calls if c.startswith(prefixes)]

    # Player profile operations
    async def get_player_profile(self, player_id) -> Optional[Dict[str, Any]]:
        self._call("get_player_profile")
        return copy.deepcopy(self.player_profiles.get(str(player_id)))

    async def get_player_profile_by_user(self, user_id) -> Optional[Dict[str, Any]]:
        self._call("get_player_profile_by_user")
        for profile in self.player_profiles.values():
            if profile["user_id"] == str(user_id):
                return copy.deepcopy(profile)
        return None

    async def get_player_profiles(self, player_ids) -> List[Dict[str, Any]]:
        self._call("get_player_profiles")
        return [copy.deepcopy(self.player_profiles[str(p)]) for p in player_ids if str(p) in self.player_profiles]

    async def create_player_profile(self, data) -> Dict[str, Any]:
        self._call("create_player_profile")
        profile = {"id": str(uuid4()), "created_at": self._timestamp(), **data}
        self.player_profiles[profile["id"]] = profile
        return copy.deepcopy(profile)

    async def update_player_profile(self, player_id, data) -> Dict[str, Any]:
        self._call("update_player_profile")
        self.player_profiles[str(player_id)].update(data)
        return copy.deepcopy(self.player_profiles[str(player_id)])

    # Rating operations
    async def get_player_ratings(self, player_ids) -> Dict[str, int]:
        self._call("get_player_ratings")
        return {p: self.player_profiles[p]["skill_rating"] for p in player_ids if p in self.player_profiles}

    async def update_player_rating(self, player_id, rating) -> Dict[str, Any]:
        self._call("update_player_rating")
        self.player_profiles[player_id]["skill_rating"] = rating
        return copy.deepcopy(self.player_profiles[player_id])

    # Stats operations
    async def get_player_stats(self, player_id) -> Optional[Dict[str, Any]]:
        self._call("get_player_stats")
        return copy.deepcopy(self.player_stats.get(str(player_id)))

    async def upsert_player_stats(self, player_id, data) -> Dict[str, Any]:
        self._call("upsert_player_stats")
        self.player_stats[player_id] = {**data, "player_id": player_id}
        return copy.deepcopy(self.player_stats[player_id])

    # Chemistry operations
    async def get_team_chemistry(self, player1_id, player2_id) -> Optional[Dict[str, Any]]:
        self._call("get_team_chemistry")
        return copy.deepcopy(self.team_chemistry.get((player1_id, player2_id)))

    async def upsert_team_chemistry(self, data) -> Dict[str, Any]:
        self._call("upsert_team_chemistry")
        assert data["player1_id"] < data["player2_id"], "chemistry rows must be canonical"
        self.team_chemistry[(data["player1_id"], data["player2_id"])] = dict(data)
        return copy.deepcopy(data)

    async def get_player_chemistry(self, player_id, limit=10) -> List[Dict[str, Any]]:
        self._call("get_player_chemistry")
        rows = [r for key, r in self.team_chemistry.items() if str(player_id) in key]
        rows.sort(key=lambda r: r["chemistry_score"], reverse=True)
        return copy.deepcopy(rows[:limit])

    # Participant operations
    async def get_participant(self, participant_id) -> Optional[Dict[str, Any]]:
        self._call("get_participant")
        return copy.deepcopy(self.participants.get(str(participant_id)))

    async def get_event_participants(self, event_id) -> List[Dict[str, Any]]:
        self._call("get_event_participants")
        rows = [p for p in self.participants.values() if p["event_id"] == str(event_id)]
        return copy.deepcopy(sorted(rows, key=lambda p: p["created_at"]))

    async def get_player_participants(self, player_id) -> List[Dict[str, Any]]:
        self._call("get_player_participants")
        pid = str(player_id)
        return copy.deepcopy([
            p for p in self.participants.values()
            if p.get("player_profile_id") == pid or p.get("partner_profile_id") == pid
        ])

    # Match operations
    async def get_match(self, match_id) -> Optional[Dict[str, Any]]:
        self._call("get_match")
        return copy.deepcopy(self.matches.get(str(match_id)))

    async def update_match(self, match_id, data) -> Dict[str, Any]:
        self._call("update_match")
        self.matches[str(match_id)].update(data)
        return copy.deepcopy(self.matches[str(match_id)])

    async def get_event_matches(self, event_id) -> List[Dict[str, Any]]:
        self._call("get_event_matches")
        rows = [m for m in self.matches.values() if m["event_id"] == str(event_id)]
        return copy.deepcopy(sorted(rows, key=lambda m: (m["round_number"], m["match_number"])))

    async def has_completed_matches(self, event_id) -> bool:
        self._call("has_completed_matches")
        return any(
            m["event_id"] == str(event_id) and m["status"] == "completed" for m in self.matches.values()
        )

    async def delete_event_matches(self, event_id) -> None:
        self._call("delete_event_matches")
        self.matches = {k: m for k, m in self.matches.items() if m["event_id"] != str(event_id)}

    async def insert_matches(self, matches) -> List[Dict[str, Any]]:
        self._call("insert_matches")
        inserted = []
        for row in matches:
            match = {"id": str(uuid4()), "rating_processed_at": None, "started_at": None,
                     "completed_at": None, **row}
            self.matches[match["id"]] = match
            inserted.append(copy.deepcopy(match))
        return inserted

    async def get_participant_matches(self, participant_ids, limit=20, offset=0) -> List[Dict[str, Any]]:
        self._call("get_participant_matches")
        ids = set(participant_ids)
        rows = [m for m in self.matches.values() if m.get("team1_id") in ids or m.get("team2_id") in ids]
        rows.sort(key=lambda m: m["created_at"], reverse=True)
        return copy.deepcopy(rows[offset:offset + limit])

    # Match result bookkeeping
    def _claim(self, match_id) -> bool:
        match = self.matches.get(match_id)
        if not match or match["status"] != "completed" or match.get("rating_processed_at"):
            return False
        match["rating_processed_at"] = datetime.now(timezone.utc).isoformat()
        return True

    async def claim_match_result(self, match_id) -> bool:
        self._call("claim_match_result")
        return self._claim(match_id)

    async def apply_match_result(self, match_id, ratings, stats, chemistry) -> bool:
        self._call("apply_match_result")
        if not self._claim(match_id):
            return False
        for row in ratings:
            self.player_profiles[row["player_id"]]["skill_rating"] = row["skill_rating"]
        for row in stats:
            self.player_stats[row["player_id"]] = dict(row)
        for row in chemistry:
            self.team_chemistry[(row["player1_id"], row["player2_id"])] = dict(row)
        return True


async def create_test_player(db_service, display_name: str = "Player", rating: int = DEFAULT_INITIAL_RATING) -> Dict[str, Any]:
    """Insert a player profile with the given rating directly, without recording a write."""
    profile = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "display_name": display_name,
        "skill_rating": rating,
        "avatar_url": None,
        "created_at": db_service._timestamp(),
    }
    db_service.player_profiles[profile["id"]] = profile
    return copy.deepcopy(profile)


def create_test_participant(db_service, event_id: str, team_name: str, player_ids: tuple = ()) -> Dict[str, Any]:
    """Check a team into an event, optionally linked to one or two players."""
    player_ids = list(player_ids) + [None, None]
    participant = {
        "id": str(uuid4()),
        "event_id": event_id,
        "team_name": team_name,
        "player_profile_id": player_ids[0],
        "partner_profile_id": player_ids[1],
        "created_at": db_service._timestamp(),
    }
    db_service.participants[participant["id"]] = participant
    return participant


def create_test_match(
    db_service,
    event_id: str,
    team1_id: Optional[str],
    team2_id: Optional[str],
    team1_score: int = 0,
    team2_score: int = 0,
    status: str = "pending",
    winner_id: Optional[str] = None,
    round_number: int = 1,
    match_number: int = 1,
) -> Dict[str, Any]:
    """Insert a match row directly."""
    match = {
        "id": str(uuid4()),
        "event_id": event_id,
        "round_number": round_number,
        "match_number": match_number,
        "court_number": match_number,
        "team1_id": team1_id,
        "team2_id": team2_id,
        "team1_score": team1_score,
        "team2_score": team2_score,
        "winner_id": winner_id,
        "status": status,
        "started_at": None,
        "completed_at": None,
        "rating_processed_at": None,
        "created_at": db_service._timestamp(),
    }
    db_service.matches[match["id"]] = match
    return match


async def create_completed_match(
    db_service,
    team1_players: tuple,
    team2_players: tuple,
    team1_score: int,
    team2_score: int,
    event_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Set up two linked participants and a completed match between them."""
    event_id = event_id or str(uuid4())
    team1 = create_test_participant(db_service, event_id, "Team One", team1_players)
    team2 = create_test_participant(db_service, event_id, "Team Two", team2_players)
    winner = team1 if team1_score > team2_score else team2
    return create_test_match(
        db_service, event_id, team1["id"], team2["id"],
        team1_score=team1_score, team2_score=team2_score,
        status="completed", winner_id=winner["id"],
    )


def seed_event(db_service, participant_count: int, event_id: Optional[str] = None) -> str:
    """Check in ``participant_count`` unlinked teams and return the event id."""
    event_id = event_id or str(uuid4())
    for i in range(participant_count):
        create_test_participant(db_service, event_id, f"Team {i + 1}")
    return event_id
