"""Exceptions raised by the Courtside core.

Every domain error carries the HTTP status the API layer should answer with, so
routers can let them bubble up to the single handler registered in
``courtside.main``.
"""


class CourtsideError(Exception):
    """Base exception for all Courtside errors."""

    status_code = 400


# ========== Lookup Errors ==========


class NotFoundError(CourtsideError):
    status_code = 404


class MatchNotFoundError(NotFoundError):
    """Raised when a match id does not resolve to a row."""


class PlayerNotFoundError(NotFoundError):
    """Raised when a player profile id does not resolve to a row."""


# ========== Match Errors ==========


class MatchUpdateError(CourtsideError):
    """Raised when a score/status update would break a match invariant."""


class MatchProcessingError(CourtsideError):
    """Raised when rating/stats persistence fails part-way through a match.

    Writes that were committed before the failure are not rolled back.
    """

    status_code = 500

    def __init__(self, match_id: str, step: str, message: str):
        self.match_id = match_id
        self.step = step
        super().__init__(f"match {match_id}: {step} failed: {message}")


# ========== Bracket Errors ==========


class BracketError(CourtsideError):
    """Base exception for bracket seeding errors. No writes have happened."""


class InsufficientParticipantsError(BracketError):
    pass


class ReseedGuardError(BracketError):
    """Raised when reseeding an event that already has completed matches."""


# ========== Profile Errors ==========


class ProfileExistsError(CourtsideError):
    status_code = 409

    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__("Profile already exists")


class ProfileOwnershipError(CourtsideError):
    status_code = 403
