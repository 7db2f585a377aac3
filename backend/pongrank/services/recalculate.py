from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Literal, NamedTuple, Sequence

from ..domain import DEFAULT_RATING, Match, Player
from .normalize import Unreplayable, normalize_match
from .rating import compute_rating_change, updated_player

logger = logging.getLogger(__name__)

ReplayOrder = Literal["id", "played_at"]
REPLAY_ORDERS: tuple[str, ...] = ("id", "played_at")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SkippedMatch(NamedTuple):
    match_id: str
    reason: str


@dataclass
class ReplayReport:
    players: list[Player]
    replayed: int = 0
    skipped: list[SkippedMatch] = field(default_factory=list)


def reset_player(player: Player) -> Player:
    return replace(player, rating=DEFAULT_RATING, wins=0, losses=0)


def _played_at_key(match: Match) -> tuple[int, datetime, str]:
    played_at = match.played_at
    if played_at is None:
        return (0, _EPOCH, match.id)
    if played_at.tzinfo is None:
        played_at = played_at.replace(tzinfo=timezone.utc)
    return (1, played_at, match.id)


def sort_matches(matches: Sequence[Match], order: ReplayOrder = "id") -> list[Match]:
    """Return ``matches`` in replay order.

    ``"id"`` relies on match ids sorting by creation time (ULIDs do).
    ``"played_at"`` sorts on the match timestamp and breaks ties by id; records
    without a timestamp are treated as the oldest.
    """

    if order == "id":
        return sorted(matches, key=lambda m: str(m.id))
    if order == "played_at":
        return sorted(matches, key=_played_at_key)
    raise ValueError(f"unknown replay order {order!r}")


def replay_history(
    players: Sequence[Player],
    matches: Sequence[Match],
    *,
    order: ReplayOrder = "id",
) -> ReplayReport:
    """Rebuild every player's rating and record from the match log.

    All players start from the default rating with no wins or losses, so the
    result never depends on previously stored stats and running the replay on
    its own output gives the same answer. Matches that cannot be normalized,
    or that reference a player id that no longer exists, are skipped and
    listed in :attr:`ReplayReport.skipped`.
    """

    lookup: dict[str, Player] = {}
    for p in players:
        lookup[str(p.id)] = reset_player(p)

    report = ReplayReport(players=[])
    for match in sort_matches(matches, order):
        outcome = normalize_match(match)
        if isinstance(outcome, Unreplayable):
            report.skipped.append(SkippedMatch(str(match.id), outcome.reason))
            continue

        missing = [pid for pid in outcome.winner_ids + outcome.loser_ids if pid not in lookup]
        if missing:
            report.skipped.append(
                SkippedMatch(str(match.id), f"unknown players: {', '.join(missing)}")
            )
            continue

        change = compute_rating_change(
            [lookup[pid].rating for pid in outcome.winner_ids],
            [lookup[pid].rating for pid in outcome.loser_ids],
        )
        for pid in outcome.winner_ids:
            lookup[pid] = updated_player(lookup[pid], True, change)
        for pid in outcome.loser_ids:
            lookup[pid] = updated_player(lookup[pid], False, change)
        report.replayed += 1

    # Preserve the caller's ordering; duplicate input ids collapse to one entry.
    seen: set[str] = set()
    for p in players:
        pid = str(p.id)
        if pid not in seen:
            seen.add(pid)
            report.players.append(lookup[pid])

    for skipped in report.skipped:
        logger.debug("Skipped match %s during replay: %s", skipped.match_id, skipped.reason)
    logger.info(
        "Replayed %d matches for %d players (%d skipped)",
        report.replayed,
        len(report.players),
        len(report.skipped),
    )
    return report


def recalculate(players: Sequence[Player], matches: Sequence[Match]) -> list[Player]:
    """Return ``players`` with ratings and records rebuilt from ``matches``."""

    return replay_history(players, matches).players
