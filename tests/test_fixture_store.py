from datetime import datetime, timedelta, timezone

import pytest

from betpool import db
from betpool.errors import (
    InvalidRound,
    InvalidRoundSize,
    MultipleActiveRounds,
    NoActiveRound,
    RoundAlreadyActive,
)
from betpool.models import ActiveRoundPointer, Round
from betpool.models.round import POINTER_ROW_ID
from betpool.services import fixture_store
from betpool.utils.timezone_utils import get_utc_time


def _deadline(days=1):
    return get_utc_time() + timedelta(days=days)


def test_no_round_is_active_on_a_fresh_database(app_ctx):
    with pytest.raises(NoActiveRound):
        fixture_store.get_active_round()


def test_open_round_activates_it(app_ctx, game_pairs):
    round_ = fixture_store.open_round(game_pairs, _deadline())

    active = fixture_store.get_active_round()
    assert active.id == round_.id
    assert active.number == 1
    assert [game.position for game in active.games] == list(range(1, 11))
    assert [(g.home_team_id, g.away_team_id) for g in active.games] == game_pairs
    assert db.session.get(ActiveRoundPointer, POINTER_ROW_ID).round_id == round_.id


@pytest.mark.parametrize("size", [0, 9, 11])
def test_open_round_requires_ten_games(app_ctx, game_pairs, size):
    pairs = (game_pairs * 2)[:size]

    with pytest.raises(InvalidRoundSize):
        fixture_store.open_round(pairs, _deadline())

    assert Round.query.count() == 0


def test_open_round_rejects_a_club_playing_itself(app_ctx, game_pairs):
    home, _ = game_pairs[0]
    game_pairs[0] = (home, home)

    with pytest.raises(InvalidRound) as excinfo:
        fixture_store.open_round(game_pairs, _deadline())

    assert excinfo.value.message == "A team cannot play against itself"


def test_open_round_rejects_a_club_in_two_games(app_ctx, game_pairs):
    game_pairs[1] = (game_pairs[0][0], game_pairs[1][1])

    with pytest.raises(InvalidRound):
        fixture_store.open_round(game_pairs, _deadline())


def test_open_round_rejects_unknown_clubs(app_ctx, game_pairs):
    game_pairs[0] = (9001, 9002)

    with pytest.raises(InvalidRound) as excinfo:
        fixture_store.open_round(game_pairs, _deadline())

    assert "9001" in excinfo.value.message


def test_second_round_cannot_open_while_one_is_active(app_ctx, game_pairs):
    first = fixture_store.open_round(game_pairs, _deadline())

    with pytest.raises(RoundAlreadyActive):
        fixture_store.open_round(game_pairs, _deadline())

    assert Round.query.count() == 1
    assert fixture_store.get_active_round().id == first.id


def test_duplicate_round_number_is_rejected(app_ctx, game_pairs):
    fixture_store.open_round(game_pairs, _deadline(), number=4)

    with pytest.raises(InvalidRound):
        fixture_store.open_round(game_pairs, _deadline(), number=4)


def test_round_number_taken_by_a_concurrent_open(app_ctx, game_pairs, monkeypatch):
    db.session.add(Round(number=1, bets_accepted_by=_deadline(), is_active=False))
    db.session.commit()
    monkeypatch.setattr(Round, "next_number", staticmethod(lambda: 1))

    with pytest.raises(RoundAlreadyActive):
        fixture_store.open_round(game_pairs, _deadline())

    assert Round.query.count() == 1
    assert db.session.get(ActiveRoundPointer, POINTER_ROW_ID).round_id is None


def test_multiple_active_rounds_are_reported(app_ctx):
    deadline = _deadline()
    db.session.add_all(
        [
            Round(number=1, bets_accepted_by=deadline, is_active=True),
            Round(number=2, bets_accepted_by=deadline, is_active=True),
        ]
    )
    db.session.commit()

    with pytest.raises(MultipleActiveRounds) as excinfo:
        fixture_store.get_active_round()

    assert excinfo.value.count == 2


def test_betting_window_closes_at_the_deadline(app_ctx, game_pairs):
    deadline = datetime(2030, 5, 1, 15, 0, tzinfo=timezone.utc)
    round_ = fixture_store.open_round(game_pairs, deadline)

    assert fixture_store.is_betting_open(round_, now=deadline - timedelta(seconds=1))
    assert not fixture_store.is_betting_open(round_, now=deadline)
    assert not fixture_store.is_betting_open(round_, now=deadline + timedelta(hours=1))


def test_deadline_is_stored_in_utc(app_ctx, game_pairs):
    local = timezone(timedelta(hours=2))
    round_ = fixture_store.open_round(
        game_pairs, datetime(2030, 5, 1, 17, 0, tzinfo=local)
    )

    reloaded = db.session.get(Round, round_.id)
    assert reloaded.deadline_utc == datetime(2030, 5, 1, 15, 0, tzinfo=timezone.utc)


def test_list_teams_is_ordered_by_name(app_ctx, team_ids):
    names = [team["name"] for team in fixture_store.list_teams()]
    assert names == sorted(names)
    assert len(names) == 20
