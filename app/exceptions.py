"""
Domain exceptions for scheduling and live scoring.

Every exception carries the HTTP status the API answers with, so endpoints can
let them propagate and the application handler renders ``{"detail": message}``.
"""
from typing import Optional


class TournamentError(Exception):
    """Base exception for tournament errors."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TournamentError):
    """Raised when input is inconsistent with the scoring rules."""
    status_code = 400


class PreconditionError(TournamentError):
    """Raised when an operation is attempted in a state that forbids it."""
    status_code = 409


class MatchNotInProgressError(PreconditionError):
    def __init__(self, match_id: Optional[str] = None):
        target = f"Match {match_id}" if match_id else "Match"
        super().__init__(f"{target} is not in progress")


class NothingToUndoError(PreconditionError):
    def __init__(self):
        super().__init__("No points recorded in the current game")


class ConcurrentUpdateError(PreconditionError):
    def __init__(self, match_id: str):
        super().__init__(f"Match {match_id} was modified concurrently, reload and retry")


class AuthorizationError(TournamentError):
    """Raised when the caller is not the assigned umpire."""
    status_code = 403

    def __init__(self, message: str = "Only the assigned umpire can update this match"):
        super().__init__(message)


class NotFoundError(TournamentError):
    """Raised when a referenced match, format, group or team does not exist."""
    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id
