from typing import Any, Sequence

from ..domain import MatchType


class ValidationError(Exception):
    """Raised when a submitted match is invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidParticipants(ValidationError):
    """Raised when match participants cannot be resolved to known players."""


def coerce_match_type(value: Any) -> MatchType:
    if isinstance(value, MatchType):
        return value
    try:
        return MatchType(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Match type must be one of: {', '.join(t.value for t in MatchType)}."
        )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def validate_match_submission(
    match_type: Any,
    winner_ids: Sequence[str],
    loser_ids: Sequence[str],
    score: Any,
) -> MatchType:
    """Validate a match submission before any rating is computed.

    Rules:
    - ``match_type`` is ``SINGLES`` or ``DOUBLES``
    - each side has exactly the number of players the type requires
    - no player appears twice on one side or on both sides
    - ``score`` is a non-empty string (its format is not checked)

    Returns the coerced :class:`MatchType`.
    """

    mtype = coerce_match_type(match_type)
    required = mtype.team_size
    if len(winner_ids) != required or len(loser_ids) != required:
        raise ValidationError(
            f"{mtype.value.title()} needs {_plural(required, 'winner')} and "
            f"{_plural(required, 'loser')}."
        )

    for label, ids in (("winners", winner_ids), ("losers", loser_ids)):
        if any(not str(pid).strip() for pid in ids):
            raise ValidationError(f"Player ids for {label} must not be empty.")
        if len(set(ids)) != len(ids):
            raise ValidationError(f"A player is listed twice among the {label}.")

    overlap = sorted(set(winner_ids) & set(loser_ids))
    if overlap:
        raise ValidationError(
            f"Players cannot be on both sides: {', '.join(overlap)}."
        )

    if not isinstance(score, str) or not score.strip():
        raise ValidationError("Please enter a score (e.g. 11-9).")

    return mtype
