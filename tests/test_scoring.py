from types import SimpleNamespace

import pytest

import config
from betpool.services.settlement import compute_user_deltas
from betpool.utils.scoring import (
    ScoreDelta,
    Sign,
    club_points,
    derive_sign,
    score_prediction,
)


@pytest.mark.parametrize(
    "home, away, expected",
    [
        (2, 1, Sign.HOME),
        (1, 0, Sign.HOME),
        (0, 0, Sign.DRAW),
        (3, 3, Sign.DRAW),
        (0, 2, Sign.AWAY),
        (1, 4, Sign.AWAY),
    ],
)
def test_derive_sign(home, away, expected):
    assert derive_sign(home, away) is expected


def test_sign_labels():
    assert [sign.value for sign in Sign] == ["1", "X", "2"]


def test_exact_score_counts_score_and_sign():
    delta = score_prediction((2, 1), (2, 1), exact_points=3, sign_points=1)
    assert delta == ScoreDelta(guessed_scores=1, guessed_signs=1, points=3)


def test_sign_only_match():
    delta = score_prediction((2, 1), (3, 0), exact_points=3, sign_points=1)
    assert delta == ScoreDelta(guessed_scores=0, guessed_signs=1, points=1)


def test_draw_sign_only_match():
    delta = score_prediction((1, 1), (0, 0), exact_points=3, sign_points=1)
    assert delta == ScoreDelta(guessed_signs=1, points=1)


def test_wrong_sign_scores_nothing():
    delta = score_prediction((2, 1), (0, 2), exact_points=3, sign_points=1)
    assert delta == ScoreDelta()
    assert not delta


def test_weights_default_to_configuration(app_ctx):
    app_ctx.config["EXACT_SCORE_POINTS"] = 5
    app_ctx.config["SIGN_POINTS"] = 2

    assert score_prediction((1, 0), (1, 0)).points == 5
    assert score_prediction((1, 0), (2, 0)).points == 2


def test_score_deltas_add_up():
    total = ScoreDelta(1, 1, 3) + ScoreDelta(0, 1, 1) + ScoreDelta()
    assert total == ScoreDelta(guessed_scores=1, guessed_signs=2, points=4)


def test_club_points():
    assert club_points(Sign.HOME, is_home=True) == 3
    assert club_points(Sign.HOME, is_home=False) == 0
    assert club_points(Sign.AWAY, is_home=False) == 3
    assert club_points(Sign.AWAY, is_home=True) == 0
    assert club_points(Sign.DRAW, is_home=True) == 1
    assert club_points(Sign.DRAW, is_home=False) == 1


def test_compute_user_deltas_sums_per_user():
    games = {
        1: SimpleNamespace(home_goals=2, away_goals=1),
        2: SimpleNamespace(home_goals=0, away_goals=0),
    }
    bets = [
        SimpleNamespace(user_id=7, game_id=1, predicted=(2, 1)),
        SimpleNamespace(user_id=7, game_id=2, predicted=(1, 1)),
        SimpleNamespace(user_id=8, game_id=1, predicted=(0, 3)),
    ]

    deltas, scored = compute_user_deltas(games, bets, exact_points=3, sign_points=1)

    assert scored == 3
    assert deltas[7] == ScoreDelta(guessed_scores=1, guessed_signs=2, points=4)
    assert not deltas[8]


def test_sign_weight_must_be_lower_than_exact_weight():
    class BrokenWeights(config.TestingConfig):
        EXACT_SCORE_POINTS = 1
        SIGN_POINTS = 1

    with pytest.raises(ValueError):
        BrokenWeights()
