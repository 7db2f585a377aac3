import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_replay_order
from ..db import get_session
from ..domain import Match, Player
from ..exceptions import http_problem
from ..schemas import (
    PlayerOut,
    RecalculateOut,
    SkippedMatchOut,
    SyncIn,
    SyncMatchIn,
    SyncOut,
    SyncPlayerIn,
)
from ..services import replay_history
from ..store import LedgerStore, ledger_write_lock, match_from_row, player_from_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/recalculate", response_model=RecalculateOut)
async def recalculate_all(session: AsyncSession = Depends(get_session)) -> RecalculateOut:
    """Rebuild every player's rating and record from the full match log."""

    store = LedgerStore(session)
    async with ledger_write_lock:
        snapshot = await store.load_all()
        report = replay_history(
            snapshot.players, snapshot.matches, order=get_replay_order()
        )
        saved = await store.update_players(report.players)
    if report.skipped:
        logger.warning(
            "Recalculation skipped %d of %d matches",
            len(report.skipped),
            len(snapshot.matches),
        )
    logger.info("Recalculated stats for %d players", saved)
    return RecalculateOut(
        players=[PlayerOut.from_player(p) for p in report.players],
        replayed=report.replayed,
        skipped=[
            SkippedMatchOut(matchId=s.match_id, reason=s.reason) for s in report.skipped
        ],
    )


def _sync_invalid(detail: str):
    return http_problem(status_code=400, detail=detail, code="sync_invalid")


def _sync_players(items: list[SyncPlayerIn]) -> list[Player]:
    players = [player_from_row(item) for item in items]
    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for pos, player in enumerate(players, start=1):
        if not player.id:
            raise _sync_invalid(f"Player #{pos} has no id.")
        if not player.name:
            raise _sync_invalid(f"Player {player.id} has no name.")
        if player.id in seen_ids:
            raise _sync_invalid(f"Player id {player.id} appears more than once.")
        if player.name.lower() in seen_names:
            raise _sync_invalid(f"Player name '{player.name}' appears more than once.")
        seen_ids.add(player.id)
        seen_names.add(player.name.lower())
    return players


def _sync_matches(items: list[SyncMatchIn]) -> list[Match]:
    matches = [match_from_row(item) for item in items]
    seen: set[str] = set()
    for pos, match in enumerate(matches, start=1):
        if not match.id:
            raise _sync_invalid(f"Match #{pos} has no id.")
        if match.id in seen:
            raise _sync_invalid(f"Match id {match.id} appears more than once.")
        seen.add(match.id)
    return matches


@router.post("/sync", response_model=SyncOut)
async def full_sync(body: SyncIn, session: AsyncSession = Depends(get_session)) -> SyncOut:
    """Replace all players and/or all matches with the supplied records.

    Omitted collections are left as they are. Player stats are written as
    given; run ``POST /admin/recalculate`` to derive them from the matches.
    """

    players = _sync_players(body.players) if body.players is not None else None
    matches = _sync_matches(body.matches) if body.matches is not None else None

    async with ledger_write_lock:
        await LedgerStore(session).replace_all(players=players, matches=matches)
    logger.warning(
        "Full sync replaced tables: players=%s matches=%s",
        None if players is None else len(players),
        None if matches is None else len(matches),
    )
    return SyncOut(
        players=None if players is None else len(players),
        matches=None if matches is None else len(matches),
    )
