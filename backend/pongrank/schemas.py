from typing import Any, List, Literal, Optional
from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .domain import Match, Player


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("name must be a string")
        trimmed = " ".join(value.split())
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed


class PlayerOut(BaseModel):
    id: str
    name: str
    rating: float
    wins: int
    losses: int
    createdAt: Optional[datetime] = None

    @classmethod
    def from_player(cls, p: Player) -> "PlayerOut":
        return cls(
            id=p.id,
            name=p.name,
            rating=p.rating,
            wins=p.wins,
            losses=p.losses,
            createdAt=p.created_at,
        )


class PlayerListOut(BaseModel):
    players: List[PlayerOut]
    total: int
    limit: int
    offset: int


class MatchCreate(BaseModel):
    type: Literal["SINGLES", "DOUBLES"] = "SINGLES"
    winnerIds: List[str]
    loserIds: List[str]
    score: str

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class PlayerNameOut(BaseModel):
    id: str
    name: str


class MatchOut(BaseModel):
    id: str
    playedAt: Optional[datetime] = None
    type: Optional[str] = None
    winnerIds: List[str] = Field(default_factory=list)
    loserIds: List[str] = Field(default_factory=list)
    score: str = ""
    ratingChange: int = 0

    @classmethod
    def from_match(cls, m: Match) -> "MatchOut":
        return cls(
            id=m.id,
            playedAt=m.played_at,
            type=m.type.value if m.type else None,
            winnerIds=list(m.winner_ids),
            loserIds=list(m.loser_ids),
            score=m.score,
            ratingChange=m.rating_change,
        )


class MatchSummaryOut(MatchOut):
    """Match as shown in history: sides resolved for either stored shape."""

    replayable: bool = True
    skipReason: Optional[str] = None
    winners: List[PlayerNameOut] = Field(default_factory=list)
    losers: List[PlayerNameOut] = Field(default_factory=list)


class MatchListOut(BaseModel):
    matches: List[MatchSummaryOut]
    total: int
    limit: int
    offset: int


class MatchLoggedOut(BaseModel):
    match: MatchOut
    players: List[PlayerOut]


class MatchDeletedOut(BaseModel):
    id: str
    recalculationRequired: bool = True


class LeaderboardEntryOut(BaseModel):
    rank: int
    playerId: str
    playerName: str
    rating: float
    wins: int
    losses: int
    matches: int
    winPct: float


class LeaderboardOut(BaseModel):
    leaders: List[LeaderboardEntryOut]
    total: int
    limit: int
    offset: int


class SkippedMatchOut(BaseModel):
    matchId: str
    reason: str


class RecalculateOut(BaseModel):
    players: List[PlayerOut]
    replayed: int
    skipped: List[SkippedMatchOut] = Field(default_factory=list)


class SyncPlayerIn(BaseModel):
    """A player record from a bulk import.

    Values are kept raw and coerced by the store the same way stored rows
    are; ``elo`` is accepted for ``rating``.
    """

    model_config = ConfigDict(extra="ignore")

    id: Any = None
    name: Any = None
    rating: Any = Field(None, validation_alias=AliasChoices("rating", "elo"))
    wins: Any = None
    losses: Any = None
    created_at: Any = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))


class SyncMatchIn(BaseModel):
    """A match record from a bulk import, in either stored shape."""

    model_config = ConfigDict(extra="ignore")

    id: Any = None
    played_at: Any = Field(
        None, validation_alias=AliasChoices("playedAt", "played_at", "date")
    )
    type: Any = None
    winner_ids: Any = Field(None, validation_alias=AliasChoices("winnerIds", "winner_ids"))
    loser_ids: Any = Field(None, validation_alias=AliasChoices("loserIds", "loser_ids"))
    score: Any = None
    rating_change: Any = Field(
        None, validation_alias=AliasChoices("ratingChange", "rating_change", "eloChange")
    )
    team_a_ids: Any = Field(None, validation_alias=AliasChoices("teamAIds", "team_a_ids"))
    team_b_ids: Any = Field(None, validation_alias=AliasChoices("teamBIds", "team_b_ids"))
    winner_team: Any = Field(None, validation_alias=AliasChoices("winnerTeam", "winner_team"))
    sets: Any = None


class SyncIn(BaseModel):
    players: Optional[List[SyncPlayerIn]] = None
    matches: Optional[List[SyncMatchIn]] = None


class SyncOut(BaseModel):
    players: Optional[int] = None
    matches: Optional[int] = None
    recalculationRequired: bool = True
