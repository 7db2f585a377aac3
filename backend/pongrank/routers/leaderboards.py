from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..domain import Player
from ..schemas import LeaderboardEntryOut, LeaderboardOut
from ..store import LedgerStore

# Resource-only prefix; no /api or /api/v0 here
router = APIRouter(prefix="/leaderboards", tags=["leaderboards"])


def _win_pct(p: Player) -> float:
    if not p.matches_played:
        return 0.0
    return round(100.0 * p.wins / p.matches_played, 1)


def rank_players(players: list[Player]) -> list[Player]:
    """Order players by rating, then wins, then name."""

    return sorted(players, key=lambda p: (-p.rating, -p.wins, p.name.lower(), p.id))


# GET /api/v0/leaderboards
@router.get("", response_model=LeaderboardOut)
async def leaderboard(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    ranked = rank_players((await LedgerStore(session).load_all()).players)
    leaders = [
        LeaderboardEntryOut(
            rank=offset + i + 1,
            playerId=p.id,
            playerName=p.name,
            rating=p.rating,
            wins=p.wins,
            losses=p.losses,
            matches=p.matches_played,
            winPct=_win_pct(p),
        )
        for i, p in enumerate(ranked[offset : offset + limit])
    ]
    return LeaderboardOut(leaders=leaders, total=len(ranked), limit=limit, offset=offset)
