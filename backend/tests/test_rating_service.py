import itertools

import pytest

from pongrank.domain import Player
from pongrank.services.rating import (
    K_FACTOR,
    compute_rating_change,
    expected_score,
    updated_player,
)


RATINGS = [800, 1000, 1184, 1200, 1216, 1500, 2400]


@pytest.mark.parametrize("winner, loser", list(itertools.product(RATINGS, RATINGS)))
def test_change_is_integer_within_k(winner, loser) -> None:
    change = compute_rating_change([winner], [loser])
    assert isinstance(change, int)
    assert 0 <= change <= K_FACTOR


def test_equal_groups_exchange_half_of_k() -> None:
    assert compute_rating_change([1200], [1200]) == 16
    assert compute_rating_change([1300, 1100], [1250, 1150]) == 16


def test_singles_between_new_players() -> None:
    # Two fresh players, A beats B 11-8.
    change = compute_rating_change([1200], [1200])
    a = updated_player(Player(id="a", name="A"), True, change)
    b = updated_player(Player(id="b", name="B"), False, change)

    assert change == 16
    assert (a.rating, a.wins, a.losses) == (1216, 1, 0)
    assert (b.rating, b.wins, b.losses) == (1184, 0, 1)


def test_favourite_beating_underdog_gains_little() -> None:
    # expected = 1 / (1 + 10 ** (-216 / 400)) ~= 0.776, 32 * 0.224 ~= 7.16
    assert expected_score([1216], [1000]) == pytest.approx(0.7762, abs=1e-4)
    change = compute_rating_change([1216], [1000])
    assert change == 7

    a = updated_player(Player(id="a", name="A", rating=1216, wins=1), True, change)
    c = updated_player(Player(id="c", name="C", rating=1000), False, change)
    assert a.rating == 1223
    assert c.rating == 993


def test_underdog_upset_gains_more() -> None:
    assert compute_rating_change([1000], [1216]) == 25


def test_doubles_uses_team_averages() -> None:
    # avg 1250 vs avg 1100: expected ~= 0.7034, 32 * 0.2966 ~= 9.49
    change = compute_rating_change([1200, 1300], [1100, 1100])
    assert change == 9
    assert change == compute_rating_change([1250], [1100])


def test_uneven_group_sizes_are_supported() -> None:
    assert compute_rating_change([1200], [1100, 1300]) == 16


def test_rounding_is_half_up() -> None:
    # k=1 at even odds gives exactly 0.5, which rounds up rather than to even.
    assert compute_rating_change([1200], [1200], k=1) == 1
    assert compute_rating_change([1200], [1200], k=5) == 3


def test_near_certain_win_can_round_to_zero() -> None:
    assert compute_rating_change([3000], [1000]) == 0


@pytest.mark.parametrize("winners, losers", [([], [1200]), ([1200], []), ([], [])])
def test_empty_group_is_rejected(winners, losers) -> None:
    with pytest.raises(ValueError):
        compute_rating_change(winners, losers)


def test_updated_player_returns_copy() -> None:
    original = Player(id="p1", name="P1", rating=1200, wins=2, losses=3)
    winner = updated_player(original, True, 10)
    loser = updated_player(original, False, 10)

    assert (original.rating, original.wins, original.losses) == (1200, 2, 3)
    assert (winner.rating, winner.wins, winner.losses) == (1210, 3, 3)
    assert (loser.rating, loser.wins, loser.losses) == (1190, 2, 4)
    assert winner.id == loser.id == "p1"
    assert winner.created_at == original.created_at
