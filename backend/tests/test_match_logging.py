from datetime import datetime, timezone

import pytest
import ulid

from pongrank.domain import MatchType, Player
from pongrank.services.match_logging import log_match, new_match_id
from pongrank.services.validation import InvalidParticipants, ValidationError

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _snapshot() -> list[Player]:
    return [
        Player(id="a", name="A"),
        Player(id="b", name="B"),
        Player(id="c", name="C", rating=1000),
        Player(id="d", name="D", rating=1300),
    ]


def test_singles_match_updates_both_players() -> None:
    players = _snapshot()
    logged = log_match("SINGLES", ["a"], ["b"], "11-8", players, now=NOW, new_id=lambda: "m1")

    assert logged.match.id == "m1"
    assert logged.match.played_at == NOW
    assert logged.match.type is MatchType.SINGLES
    assert logged.match.winner_ids == ("a",)
    assert logged.match.loser_ids == ("b",)
    assert logged.match.score == "11-8"
    assert logged.match.rating_change == 16

    by_id = {p.id: p for p in logged.updated_players}
    assert (by_id["a"].rating, by_id["a"].wins) == (1216, 1)
    assert (by_id["b"].rating, by_id["b"].losses) == (1184, 1)
    assert by_id["c"] is players[2]
    assert by_id["d"] is players[3]
    assert [p.id for p in logged.updated_players] == ["a", "b", "c", "d"]


def test_snapshot_is_not_mutated() -> None:
    players = _snapshot()
    log_match("SINGLES", ["a"], ["b"], "11-8", players)
    assert [(p.rating, p.wins, p.losses) for p in players] == [
        (1200, 0, 0),
        (1200, 0, 0),
        (1000, 0, 0),
        (1300, 0, 0),
    ]


def test_doubles_match_applies_same_change_to_every_player() -> None:
    players = _snapshot()
    logged = log_match("DOUBLES", ["a", "d"], ["b", "c"], "21-15", players)
    # avg 1250 vs avg 1100
    assert logged.match.rating_change == 9
    by_id = {p.id: p for p in logged.updated_players}
    assert by_id["a"].rating == 1209
    assert by_id["d"].rating == 1309
    assert by_id["b"].rating == 1191
    assert by_id["c"].rating == 991


def test_chained_matches_use_current_ratings() -> None:
    first = log_match("SINGLES", ["a"], ["b"], "11-8", _snapshot())
    second = log_match("SINGLES", ["a"], ["c"], "11-2", first.updated_players)
    assert second.match.rating_change == 7
    by_id = {p.id: p for p in second.updated_players}
    assert (by_id["a"].rating, by_id["a"].wins) == (1223, 2)
    assert by_id["c"].rating == 993


def test_unknown_player_is_rejected() -> None:
    with pytest.raises(InvalidParticipants) as exc:
        log_match("SINGLES", ["a"], ["zz"], "11-8", _snapshot())
    assert "zz" in exc.value.detail


def test_validation_runs_before_resolution() -> None:
    with pytest.raises(ValidationError) as exc:
        log_match("DOUBLES", ["a"], ["zz"], "11-8", _snapshot())
    assert not isinstance(exc.value, InvalidParticipants)


def test_empty_score_is_rejected() -> None:
    with pytest.raises(ValidationError):
        log_match("SINGLES", ["a"], ["b"], "", _snapshot())


def test_default_ids_are_sortable_ulids() -> None:
    first = new_match_id()
    second = new_match_id()
    assert len(first) == 26
    assert str(ulid.from_str(first)) == first
    assert first != second
