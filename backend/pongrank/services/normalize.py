"""Translate stored match records into a canonical winners/losers view.

Two record shapes live side by side in the match table:

* canonical: ``winner_ids`` and ``loser_ids``
* legacy: ``team_a_ids``/``team_b_ids`` plus a ``winner_team`` flag of
  ``"A"`` or ``"B"``

Everything downstream of :func:`normalize_match` only ever sees a
:class:`MatchOutcome`. Records that yield no usable groups come back as
:class:`Unreplayable` so callers can skip them and report why.
"""

from __future__ import annotations

from typing import Any, Iterable, NamedTuple

from ..domain import Match


class MatchOutcome(NamedTuple):
    winner_ids: tuple[str, ...]
    loser_ids: tuple[str, ...]


class Unreplayable(NamedTuple):
    reason: str


def canonical_id(value: Any) -> str | None:
    """Return ``value`` as a canonical string id, or ``None`` if blank.

    Spreadsheet-era records stored ids as numbers, so ``7`` and ``7.0`` both
    map to ``"7"``.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def canonical_ids(values: Iterable[Any] | None) -> tuple[str, ...]:
    """Return the distinct canonical ids in ``values``, keeping first-seen order."""

    if values is None or isinstance(values, (str, bytes)):
        return ()
    seen: list[str] = []
    for value in values:
        pid = canonical_id(value)
        if pid is not None and pid not in seen:
            seen.append(pid)
    return tuple(seen)


def normalize_match(match: Match) -> MatchOutcome | Unreplayable:
    winners = canonical_ids(match.winner_ids)
    losers = canonical_ids(match.loser_ids)
    if winners and losers:
        return _checked(winners, losers)

    team_a = canonical_ids(match.team_a_ids)
    team_b = canonical_ids(match.team_b_ids)
    if team_a and team_b:
        flag = (match.winner_team or "").strip().upper()
        if flag == "A":
            return _checked(team_a, team_b)
        if flag == "B":
            return _checked(team_b, team_a)
        return Unreplayable(f"unknown winner team {match.winner_team!r}")

    return Unreplayable("no winner/loser or team ids")


def _checked(winners: tuple[str, ...], losers: tuple[str, ...]) -> MatchOutcome | Unreplayable:
    if set(winners) & set(losers):
        return Unreplayable("player listed on both sides")
    return MatchOutcome(winners, losers)
