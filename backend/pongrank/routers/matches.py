# backend/pongrank/routers/matches.py
import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..domain import Match, Player
from ..exceptions import MatchNotFound, ProblemDetail, http_problem
from ..rate_limit import limiter, match_rate_limit
from ..schemas import (
    MatchCreate,
    MatchDeletedOut,
    MatchListOut,
    MatchLoggedOut,
    MatchOut,
    MatchSummaryOut,
    PlayerNameOut,
    PlayerOut,
)
from ..services import (
    InvalidParticipants,
    Unreplayable,
    ValidationError,
    log_match,
    normalize_match,
)
from ..store import LedgerStore, ledger_write_lock

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/matches",
    tags=["matches"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)

UNKNOWN_PLAYER_NAME = "Unknown"


def _summarize(match: Match, names: dict[str, str]) -> MatchSummaryOut:
    base = MatchOut.from_match(match).model_dump()
    outcome = normalize_match(match)
    if isinstance(outcome, Unreplayable):
        return MatchSummaryOut(**base, replayable=False, skipReason=outcome.reason)

    def _named(ids: tuple[str, ...]) -> list[PlayerNameOut]:
        return [PlayerNameOut(id=pid, name=names.get(pid, UNKNOWN_PLAYER_NAME)) for pid in ids]

    return MatchSummaryOut(
        **base,
        replayable=True,
        winners=_named(outcome.winner_ids),
        losers=_named(outcome.loser_ids),
    )


def _names(players: list[Player]) -> dict[str, str]:
    return {p.id: p.name for p in players}


@router.post("", response_model=MatchLoggedOut)
@limiter.limit(match_rate_limit)
async def create_match(
    request: Request,
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
) -> MatchLoggedOut:
    store = LedgerStore(session)
    async with ledger_write_lock:
        snapshot = await store.load_all()
        try:
            logged = log_match(
                body.type, body.winnerIds, body.loserIds, body.score, snapshot.players
            )
        except InvalidParticipants as exc:
            raise http_problem(
                status_code=400,
                detail=exc.detail,
                code="match_invalid_participants",
            )
        except ValidationError as exc:
            raise http_problem(status_code=400, detail=exc.detail, code="match_invalid")

        participants = set(logged.match.winner_ids) | set(logged.match.loser_ids)
        changed = [p for p in logged.updated_players if p.id in participants]
        try:
            await store.append_match(logged.match)
            await store.update_players(changed)
        except SQLAlchemyError:
            logger.error(
                "Failed to persist match %s; player stats need a recalculation",
                logged.match.id,
            )
            raise

    return MatchLoggedOut(
        match=MatchOut.from_match(logged.match),
        players=[PlayerOut.from_player(p) for p in changed],
    )


@router.get("", response_model=MatchListOut)
async def list_matches(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> MatchListOut:
    snapshot = await LedgerStore(session).load_all()
    names = _names(snapshot.players)
    newest_first = list(reversed(snapshot.matches))
    page = newest_first[offset : offset + limit]
    return MatchListOut(
        matches=[_summarize(m, names) for m in page],
        total=len(newest_first),
        limit=limit,
        offset=offset,
    )


@router.get("/{match_id}", response_model=MatchSummaryOut)
async def get_match(
    match_id: str, session: AsyncSession = Depends(get_session)
) -> MatchSummaryOut:
    store = LedgerStore(session)
    match = await store.get_match(match_id)
    if match is None:
        raise MatchNotFound(match_id)
    names = _names((await store.load_all()).players)
    return _summarize(match, names)


@router.delete("/{match_id}", response_model=MatchDeletedOut)
async def delete_match(
    match_id: str, session: AsyncSession = Depends(get_session)
) -> MatchDeletedOut:
    """Hard-delete a match.

    Player stats are not touched; call ``POST /admin/recalculate`` afterwards
    to rebuild them from the remaining history.
    """

    async with ledger_write_lock:
        deleted = await LedgerStore(session).delete_match(match_id)
    if not deleted:
        raise MatchNotFound(match_id)
    logger.info("Deleted match %s; recalculation required", match_id)
    return MatchDeletedOut(id=match_id)
