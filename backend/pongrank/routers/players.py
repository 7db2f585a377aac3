import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..domain import new_player
from ..exceptions import PlayerAlreadyExists, PlayerNotFound, ProblemDetail
from ..schemas import PlayerCreate, PlayerListOut, PlayerOut
from ..store import LedgerStore, ledger_write_lock

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


@router.post("", response_model=PlayerOut)
async def create_player(
    body: PlayerCreate,
    session: AsyncSession = Depends(get_session),
):
    store = LedgerStore(session)
    async with ledger_write_lock:
        if await store.player_name_taken(body.name):
            raise PlayerAlreadyExists(body.name)
        player = new_player(body.name)
        await store.append_player(player)
    logger.info("Registered player %s (%s)", player.id, player.name)
    return PlayerOut.from_player(player)


@router.get("", response_model=PlayerListOut)
async def list_players(
    q: str = "",
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    players = (await LedgerStore(session).load_all()).players
    if q:
        needle = q.strip().lower()
        players = [p for p in players if needle in p.name.lower()]
    page = players[offset : offset + limit]
    return PlayerListOut(
        players=[PlayerOut.from_player(p) for p in page],
        total=len(players),
        limit=limit,
        offset=offset,
    )


@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(player_id: str, session: AsyncSession = Depends(get_session)):
    player = await LedgerStore(session).get_player(player_id)
    if player is None:
        raise PlayerNotFound(player_id)
    return PlayerOut.from_player(player)


@router.delete("/{player_id}", status_code=204)
async def delete_player(player_id: str, session: AsyncSession = Depends(get_session)):
    """Hard-delete a player.

    Matches that reference the player stay in the log; the next
    recalculation skips them.
    """

    async with ledger_write_lock:
        deleted = await LedgerStore(session).delete_player(player_id)
    if not deleted:
        raise PlayerNotFound(player_id)
    logger.info("Deleted player %s", player_id)
    return Response(status_code=204)
