from sqlalchemy import (
    Column,
    String,
    DateTime,
    JSON,
    Integer,
    Float,
    Index,
)
from sqlalchemy.sql import func
from .db import Base


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    rating = Column(Float, nullable=False, default=1200.0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("uq_player_name_lower", func.lower(name), unique=True),
    )


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)  # ULID; sorts in creation order
    played_at = Column(DateTime(timezone=True), nullable=True)
    type = Column(String, nullable=True)  # "SINGLES" | "DOUBLES"
    winner_ids = Column(JSON, nullable=True)
    loser_ids = Column(JSON, nullable=True)
    # Free text; stored as a string so "11-8" is never reinterpreted.
    score = Column(String, nullable=False, default="")
    rating_change = Column(Integer, nullable=True)

    # Legacy team-based shape, kept readable for older rows.
    team_a_ids = Column(JSON, nullable=True)
    team_b_ids = Column(JSON, nullable=True)
    winner_team = Column(String, nullable=True)  # "A" | "B"
    # Per-set scores ({"teamAScore", "teamBScore"}) from rows without a score.
    sets = Column(JSON, nullable=True)
