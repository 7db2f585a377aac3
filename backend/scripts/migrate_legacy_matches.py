#!/usr/bin/env python3
"""Admin helper to rewrite legacy team-based match rows into winner/loser ids."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from dataclasses import asdict, dataclass, field
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from pongrank import models
from pongrank.domain import Match, MatchType
from pongrank.services.normalize import Unreplayable, normalize_match
from pongrank.store import match_from_row


@dataclass
class MigrationSummary:
    migrated: List[str] = field(default_factory=list)
    untranslatable: dict = field(default_factory=dict)
    already_canonical: int = 0


def _is_legacy(match: Match) -> bool:
    return not match.winner_ids or not match.loser_ids


def _type_for(team_size: int) -> str | None:
    for mtype in MatchType:
        if mtype.team_size == team_size:
            return mtype.value
    return None


async def migrate_legacy_matches(
    session: AsyncSession, *, dry_run: bool = False
) -> MigrationSummary:
    summary = MigrationSummary()
    rows = (
        await session.execute(select(models.Match).order_by(models.Match.id))
    ).scalars().all()
    for row in rows:
        match = match_from_row(row)
        if not _is_legacy(match):
            summary.already_canonical += 1
            continue
        outcome = normalize_match(match)
        if isinstance(outcome, Unreplayable):
            summary.untranslatable[row.id] = outcome.reason
            continue
        summary.migrated.append(row.id)
        if dry_run:
            continue
        row.winner_ids = list(outcome.winner_ids)
        row.loser_ids = list(outcome.loser_ids)
        if row.type is None and len(outcome.winner_ids) == len(outcome.loser_ids):
            row.type = _type_for(len(outcome.winner_ids))
        row.team_a_ids = None
        row.team_b_ids = None
        row.winner_team = None
        if not (row.score or "").strip() and match.score:
            row.score = match.score
    if not dry_run:
        await session.commit()
    return summary


async def _get_engine() -> AsyncEngine:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace(
            "postgresql://", "postgresql+asyncpg://", 1
        )
    return create_async_engine(database_url, echo=False, pool_pre_ping=True)


async def main() -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Rewrite matches stored with teamAIds/teamBIds/winnerTeam into "
            "winner and loser ids. Rows that cannot be translated are reported "
            "and left untouched."
        )
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the proposed changes without writing them to the database.",
    )
    args = parser.parse_args()

    engine = await _get_engine()
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with Session() as session:
            summary = await migrate_legacy_matches(session, dry_run=args.dry_run)
        print(json.dumps(asdict(summary), indent=2, sort_keys=True))
        if args.dry_run:
            print("Dry run; no updates written.")
        elif summary.migrated:
            print("Run POST /admin/recalculate to refresh player stats.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
