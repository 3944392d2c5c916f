"""
Scoring rules for the football pool

This module derives match outcomes from goal counts and scores single
predictions. Aggregation into user totals happens in the settlement service
(betpool/services/settlement.py); ranking happens in betpool/services/standings.py.
"""

import enum
from dataclasses import dataclass

from flask import current_app

# Highest goal count accepted for a prediction or a final score
MAX_GOALS = 99

# Club table points
WIN_POINTS = 3
DRAW_POINTS = 1
LOSS_POINTS = 0


class Sign(enum.Enum):
    """Outcome of a game, labelled the way the pool's clients show it"""

    HOME = "1"
    DRAW = "X"
    AWAY = "2"


def derive_sign(home_goals, away_goals):
    """Return the outcome sign for a pair of goal counts"""
    if home_goals > away_goals:
        return Sign.HOME
    if home_goals < away_goals:
        return Sign.AWAY
    return Sign.DRAW


@dataclass
class ScoreDelta:
    """Counter increments produced by one or more scored predictions"""

    guessed_scores: int = 0
    guessed_signs: int = 0
    points: int = 0

    def __add__(self, other):
        return ScoreDelta(
            self.guessed_scores + other.guessed_scores,
            self.guessed_signs + other.guessed_signs,
            self.points + other.points,
        )

    def __bool__(self):
        return bool(self.guessed_scores or self.guessed_signs or self.points)


def get_weights():
    """Return (exact_score_points, sign_points) from the app configuration"""
    return (
        current_app.config["EXACT_SCORE_POINTS"],
        current_app.config["SIGN_POINTS"],
    )


def score_prediction(predicted, actual, exact_points=None, sign_points=None):
    """
    Score a single prediction against the official result.

    Args:
        predicted: (home_goals, away_goals) the bettor submitted
        actual: (home_goals, away_goals) the official final score
        exact_points: weight of an exact score, defaults to the configured value
        sign_points: weight of a correct sign only, defaults to the configured value

    Returns:
        ScoreDelta with the counter increments for this prediction
    """
    if exact_points is None or sign_points is None:
        configured_exact, configured_sign = get_weights()
        exact_points = configured_exact if exact_points is None else exact_points
        sign_points = configured_sign if sign_points is None else sign_points

    if tuple(predicted) == tuple(actual):
        return ScoreDelta(guessed_scores=1, guessed_signs=1, points=exact_points)

    if derive_sign(*predicted) == derive_sign(*actual):
        return ScoreDelta(guessed_signs=1, points=sign_points)

    return ScoreDelta()


def club_points(sign, is_home):
    """Points a club earns for a result, 3/1/0 for win/draw/loss"""
    if sign is Sign.DRAW:
        return DRAW_POINTS
    won = (sign is Sign.HOME) == is_home
    return WIN_POINTS if won else LOSS_POINTS
