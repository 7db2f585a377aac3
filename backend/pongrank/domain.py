"""In-memory ledger records shared by the rating services and the store."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_RATING = 1200.0


class MatchType(str, enum.Enum):
    SINGLES = "SINGLES"
    DOUBLES = "DOUBLES"

    @property
    def team_size(self) -> int:
        return 1 if self is MatchType.SINGLES else 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    rating: float = DEFAULT_RATING
    wins: int = 0
    losses: int = 0
    created_at: datetime | None = field(default_factory=_utcnow)

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses


@dataclass(frozen=True)
class Match:
    """A persisted match record.

    Canonical records carry ``winner_ids``/``loser_ids`` and ``rating_change``.
    Older records may instead carry ``team_a_ids``/``team_b_ids`` and a
    ``winner_team`` flag; see :mod:`pongrank.services.normalize`.
    """

    id: str
    played_at: datetime | None = None
    type: MatchType | None = None
    winner_ids: tuple[str, ...] = ()
    loser_ids: tuple[str, ...] = ()
    score: str = ""
    rating_change: int = 0
    team_a_ids: tuple[str, ...] = ()
    team_b_ids: tuple[str, ...] = ()
    winner_team: str | None = None


def new_player(name: str, *, now: datetime | None = None) -> Player:
    """Return a freshly registered player at the default rating."""

    return Player(
        id=uuid.uuid4().hex,
        name=name.strip(),
        rating=DEFAULT_RATING,
        wins=0,
        losses=0,
        created_at=now or _utcnow(),
    )
