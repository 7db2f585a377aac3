from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, NamedTuple, Sequence

import ulid

from ..domain import Match, Player
from .rating import compute_rating_change, updated_player
from .validation import InvalidParticipants, validate_match_submission

logger = logging.getLogger(__name__)


class LoggedMatch(NamedTuple):
    match: Match
    updated_players: list[Player]


def new_match_id() -> str:
    """Return a ULID string; ids sort in creation order, which replay relies on."""

    return str(ulid.new())


def log_match(
    match_type: Any,
    winner_ids: Sequence[str],
    loser_ids: Sequence[str],
    score: str,
    current_players: Sequence[Player],
    *,
    now: datetime | None = None,
    new_id: Callable[[], str] = new_match_id,
) -> LoggedMatch:
    """Record one match against a snapshot of players.

    The snapshot is not modified. The returned ``updated_players`` is the full
    player list with the participants replaced by their post-match state;
    persisting the match and the changed players is left to the caller.

    Raises:
        ValidationError: The submission is malformed.
        InvalidParticipants: A participant id is not in ``current_players``.
    """

    winner_ids = [str(pid) for pid in winner_ids]
    loser_ids = [str(pid) for pid in loser_ids]
    mtype = validate_match_submission(match_type, winner_ids, loser_ids, score)

    by_id = {str(p.id): p for p in current_players}
    missing = [pid for pid in winner_ids + loser_ids if pid not in by_id]
    if missing:
        raise InvalidParticipants(f"Invalid players selected: {', '.join(missing)}.")

    winners = [by_id[pid] for pid in winner_ids]
    losers = [by_id[pid] for pid in loser_ids]
    change = compute_rating_change(
        [p.rating for p in winners], [p.rating for p in losers]
    )

    match = Match(
        id=new_id(),
        played_at=now or datetime.now(timezone.utc),
        type=mtype,
        winner_ids=tuple(winner_ids),
        loser_ids=tuple(loser_ids),
        score=score,
        rating_change=change,
    )

    winner_set, loser_set = set(winner_ids), set(loser_ids)
    updated: list[Player] = []
    for p in current_players:
        pid = str(p.id)
        if pid in winner_set:
            updated.append(updated_player(p, True, change))
        elif pid in loser_set:
            updated.append(updated_player(p, False, change))
        else:
            updated.append(p)

    logger.info(
        "Logged %s match %s (%s beat %s, %s, rating change %d)",
        mtype.value,
        match.id,
        "/".join(winner_ids),
        "/".join(loser_ids),
        match.score,
        change,
    )
    return LoggedMatch(match, updated)
