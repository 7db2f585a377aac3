import math
from dataclasses import replace
from typing import Sequence

from ..domain import Player

K_FACTOR = 32


def _average(ratings: Sequence[float]) -> float:
    return sum(ratings) / len(ratings)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def expected_score(winner_ratings: Sequence[float], loser_ratings: Sequence[float]) -> float:
    """Return the probability the winning group was expected to win."""

    avg_win = _average(winner_ratings)
    avg_lose = _average(loser_ratings)
    return 1 / (1 + 10 ** ((avg_lose - avg_win) / 400))


def compute_rating_change(
    winner_ratings: Sequence[float],
    loser_ratings: Sequence[float],
    k: int = K_FACTOR,
) -> int:
    """Return the rating points transferred from the losers to the winners.

    Each group is represented by its mean rating, so the same function covers
    singles, doubles and uneven sides. The result is ``k * (1 - expected)``
    rounded half up (``11.5`` becomes ``12``), which keeps it an integer in
    ``[0, k]``.

    Raises:
        ValueError: If either group is empty.
    """

    if not winner_ratings or not loser_ratings:
        raise ValueError("both winner and loser ratings are required")

    expected_win = expected_score(winner_ratings, loser_ratings)
    return _round_half_up(k * (1 - expected_win))


def updated_player(player: Player, is_winner: bool, rating_change: int) -> Player:
    """Return a copy of ``player`` with one match result applied."""

    if is_winner:
        return replace(player, rating=player.rating + rating_change, wins=player.wins + 1)
    return replace(player, rating=player.rating - rating_change, losses=player.losses + 1)
