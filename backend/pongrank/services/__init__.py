"""Internal application services (pure helpers, no I/O)."""

from .validation import InvalidParticipants, ValidationError, validate_match_submission
from .rating import K_FACTOR, compute_rating_change, updated_player
from .normalize import MatchOutcome, Unreplayable, normalize_match
from .recalculate import ReplayReport, SkippedMatch, recalculate, replay_history
from .match_logging import LoggedMatch, log_match

__all__ = [
    "validate_match_submission",
    "ValidationError",
    "InvalidParticipants",
    "K_FACTOR",
    "compute_rating_change",
    "updated_player",
    "MatchOutcome",
    "Unreplayable",
    "normalize_match",
    "ReplayReport",
    "SkippedMatch",
    "recalculate",
    "replay_history",
    "LoggedMatch",
    "log_match",
]
