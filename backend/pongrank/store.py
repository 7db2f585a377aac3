"""Read/write access to the player and match tables.

The rating services work on plain :mod:`pongrank.domain` records; this module
converts between those and the ORM rows. Loading is lenient: numeric columns
that hold junk fall back to defaults, ids become canonical strings, id lists
stored as JSON text are decoded and anything that is not a list reads as empty.
An empty score falls back to the legacy per-set scores. One bad row never
blocks a reconciliation.

Writes are serialised by :data:`ledger_write_lock`, which is process-local;
the API must run as a single worker process.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import Any, Iterable, NamedTuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import models
from .db_errors import is_missing_table_error
from .domain import DEFAULT_RATING, Match, MatchType, Player
from .services.normalize import canonical_id
from .time_utils import parse_timestamp

logger = logging.getLogger(__name__)

# Every mutation of ratings or the match log runs under this lock so that two
# requests never compute rating changes from the same stale snapshot. It only
# serialises writers inside one process: run a single API worker.
ledger_write_lock = asyncio.Lock()


class Snapshot(NamedTuple):
    players: list[Player]
    matches: list[Match]


def _as_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _as_count(value: Any) -> int:
    return max(0, int(_as_float(value, 0.0)))


def _decoded(value: Any) -> Any:
    """Decode JSON text stored in a JSON column; other values pass through."""

    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _as_ids(value: Any) -> tuple[str, ...]:
    # Non-array values (dicts, scalars, junk text) count as empty.
    value = _decoded(value)
    if not isinstance(value, (list, tuple)):
        return ()
    ids: list[str] = []
    for item in value:
        pid = canonical_id(item)
        if pid is not None:
            ids.append(pid)
    return tuple(ids)


def _set_points(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return "" if value is None else str(value).strip()


def format_sets(value: Any) -> str:
    """Render a legacy ``sets`` list as ``"11-9, 8-11"``; ``""`` if unusable."""

    value = _decoded(value)
    if not isinstance(value, (list, tuple)):
        return ""
    parts = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        a, b = _set_points(entry.get("teamAScore")), _set_points(entry.get("teamBScore"))
        if a or b:
            parts.append(f"{a}-{b}")
    return ", ".join(parts)


def _as_score(score: Any, sets: Any) -> str:
    text = "" if score is None else str(score)
    if text.strip():
        return text
    return format_sets(sets) or text


def _as_match_type(value: Any) -> MatchType | None:
    if value is None:
        return None
    try:
        return MatchType(str(value).strip().upper())
    except ValueError:
        return None


def player_from_row(row: models.Player) -> Player:
    return Player(
        id=canonical_id(row.id) or "",
        name="" if row.name is None else " ".join(str(row.name).split()),
        rating=_as_float(row.rating, DEFAULT_RATING),
        wins=_as_count(row.wins),
        losses=_as_count(row.losses),
        created_at=parse_timestamp(row.created_at),
    )


def match_from_row(row: models.Match) -> Match:
    winner_team = row.winner_team.strip() if isinstance(row.winner_team, str) else None
    return Match(
        id=canonical_id(row.id) or "",
        played_at=parse_timestamp(row.played_at),
        type=_as_match_type(row.type),
        winner_ids=_as_ids(row.winner_ids),
        loser_ids=_as_ids(row.loser_ids),
        score=_as_score(row.score, row.sets),
        rating_change=max(0, int(_as_float(row.rating_change, 0.0))),
        team_a_ids=_as_ids(row.team_a_ids),
        team_b_ids=_as_ids(row.team_b_ids),
        winner_team=winner_team or None,
    )


def _player_row(player: Player) -> models.Player:
    row = models.Player(
        id=player.id,
        name=player.name,
        rating=player.rating,
        wins=player.wins,
        losses=player.losses,
    )
    if player.created_at is not None:
        row.created_at = player.created_at
    return row


def _match_row(match: Match) -> models.Match:
    return models.Match(
        id=match.id,
        played_at=match.played_at,
        type=match.type.value if match.type else None,
        winner_ids=list(match.winner_ids),
        loser_ids=list(match.loser_ids),
        score=match.score,
        rating_change=match.rating_change,
        team_a_ids=list(match.team_a_ids) or None,
        team_b_ids=list(match.team_b_ids) or None,
        winner_team=match.winner_team,
    )


class LedgerStore:
    """Player and match persistence backed by an async SQLAlchemy session.

    Each write method commits on its own; there is no multi-write
    transaction. A failure between writes leaves the tables inconsistent
    until :func:`pongrank.services.recalculate.replay_history` is run.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _load_rows(self, model) -> list[Any]:
        try:
            return list((await self.session.execute(select(model))).scalars().all())
        except SQLAlchemyError as exc:
            if not is_missing_table_error(exc, model.__tablename__):
                raise
            logger.warning("Table %s is missing; treating it as empty", model.__tablename__)
            await self.session.rollback()
            return []

    async def load_all(self) -> Snapshot:
        # Convert before the next query; a rollback there would expire these rows.
        players = [player_from_row(r) for r in await self._load_rows(models.Player)]
        match_rows = await self._load_rows(models.Match)
        players.sort(key=lambda p: (p.created_at is None, p.created_at or 0, p.id))
        matches = sorted((match_from_row(r) for r in match_rows), key=lambda m: m.id)
        return Snapshot(players, matches)

    async def get_player(self, player_id: str) -> Player | None:
        row = await self.session.get(models.Player, player_id)
        return player_from_row(row) if row is not None else None

    async def get_match(self, match_id: str) -> Match | None:
        row = await self.session.get(models.Match, match_id)
        return match_from_row(row) if row is not None else None

    async def player_name_taken(self, name: str) -> bool:
        normalized = name.strip().lower()
        row = (
            await self.session.execute(
                select(models.Player.id).where(func.lower(models.Player.name) == normalized)
            )
        ).first()
        return row is not None

    async def append_player(self, player: Player) -> None:
        self.session.add(_player_row(player))
        await self.session.commit()

    async def append_match(self, match: Match) -> None:
        self.session.add(_match_row(match))
        await self.session.commit()

    async def update_players(self, players: Iterable[Player]) -> int:
        """Write rating and record fields for ``players``; return rows updated.

        Players whose row no longer exists are skipped with a warning.
        """

        updated = 0
        for player in players:
            row = await self.session.get(models.Player, player.id)
            if row is None:
                logger.warning("Player %s vanished before its stats were saved", player.id)
                continue
            row.rating = player.rating
            row.wins = player.wins
            row.losses = player.losses
            updated += 1
        await self.session.commit()
        return updated

    async def update_player(self, player: Player) -> bool:
        return await self.update_players([player]) == 1

    async def replace_all(
        self,
        players: Iterable[Player] | None = None,
        matches: Iterable[Match] | None = None,
    ) -> None:
        """Replace the whole player and/or match table in one transaction.

        A collection passed as ``None`` is left untouched; an empty one clears
        its table.
        """

        if players is not None:
            await self.session.execute(delete(models.Player))
            self.session.add_all([_player_row(p) for p in players])
        if matches is not None:
            await self.session.execute(delete(models.Match))
            self.session.add_all([_match_row(m) for m in matches])
        await self.session.commit()

    async def delete_match(self, match_id: str) -> bool:
        result = await self.session.execute(
            delete(models.Match).where(models.Match.id == match_id)
        )
        await self.session.commit()
        return (result.rowcount or 0) > 0

    async def delete_player(self, player_id: str) -> bool:
        result = await self.session.execute(
            delete(models.Player).where(models.Player.id == player_id)
        )
        await self.session.commit()
        return (result.rowcount or 0) > 0
