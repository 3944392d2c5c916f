"""
Settlement engine: turns a round's official scores into points.

Everything a settlement writes (game results, user totals, club stats, the
round status and the active-round pointer) is committed in one transaction,
so a failure part-way leaves the round active and no totals changed.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from betpool import db
from betpool.errors import (
    AlreadySettled,
    IncompleteSubmission,
    NoActiveRound,
    RoundNotFound,
)
from betpool.models import ActiveRoundPointer, Bet, Round, TeamSeasonStats, UserTotals
from betpool.services.fixture_store import GAMES_PER_ROUND
from betpool.utils.performance import timer
from betpool.utils.scoring import (
    MAX_GOALS,
    ScoreDelta,
    Sign,
    club_points,
    get_weights,
    score_prediction,
)
from betpool.utils.timezone_utils import get_utc_time

logger = logging.getLogger(__name__)


@dataclass
class SettlementSummary:
    round_id: int
    round_number: int
    games_settled: int
    bets_scored: int
    users_credited: int

    def to_dict(self):
        return {
            "round_id": self.round_id,
            "round": self.round_number,
            "games_settled": self.games_settled,
            "bets_scored": self.bets_scored,
            "users_credited": self.users_credited,
        }


def _validate_final_scores(round_, final_scores):
    """Map game_id to (home_goals, away_goals), one entry per game of the round"""
    if final_scores is None or len(final_scores) != GAMES_PER_ROUND:
        raise IncompleteSubmission()

    by_game = {}
    for game_id, home_goals, away_goals in final_scores:
        if game_id is None or home_goals is None or away_goals is None:
            raise IncompleteSubmission()
        if not (0 <= home_goals <= MAX_GOALS and 0 <= away_goals <= MAX_GOALS):
            raise IncompleteSubmission(f"Goals must be between 0 and {MAX_GOALS}")
        if game_id in by_game:
            raise IncompleteSubmission()
        by_game[game_id] = (home_goals, away_goals)

    if set(by_game) != set(round_.game_ids()):
        raise IncompleteSubmission()

    return by_game


def _check_preconditions(round_id):
    round_ = db.session.get(Round, round_id)
    if round_ is None:
        raise RoundNotFound()
    if round_.is_settled:
        raise AlreadySettled()
    if not round_.is_active:
        raise NoActiveRound()
    return round_


def compute_user_deltas(games, bets, exact_points, sign_points):
    """
    Sum the score deltas of every bet per user.

    Args:
        games: settled games keyed by id
        bets: bets placed on those games

    Returns:
        (dict user_id -> ScoreDelta, number of bets scored)
    """
    deltas = defaultdict(ScoreDelta)
    scored = 0
    for bet in bets:
        game = games[bet.game_id]
        delta = score_prediction(
            bet.predicted,
            (game.home_goals, game.away_goals),
            exact_points=exact_points,
            sign_points=sign_points,
        )
        deltas[bet.user_id] = deltas[bet.user_id] + delta
        scored += 1
    return deltas, scored


def _apply_club_result(game):
    sign = game.sign
    home = TeamSeasonStats.get_or_create(game.home_team_id)
    away = TeamSeasonStats.get_or_create(game.away_team_id)

    for stats, is_home, scored, conceded in (
        (home, True, game.home_goals, game.away_goals),
        (away, False, game.away_goals, game.home_goals),
    ):
        stats.games_played += 1
        stats.goals_scored += scored
        stats.goals_conceded += conceded
        stats.points += club_points(sign, is_home)

        if sign is Sign.DRAW:
            stats.draws += 1
        elif (sign is Sign.HOME) == is_home:
            stats.wins += 1
        else:
            stats.losses += 1


@timer
def settle_round(round_id, final_scores):
    """
    Settle a round with its official final scores.

    Args:
        round_id: round to settle, must be the active round
        final_scores: sequence of ten (game_id, home_goals, away_goals)

    Returns:
        SettlementSummary

    Raises:
        RoundNotFound, AlreadySettled, NoActiveRound, IncompleteSubmission
    """
    round_ = _check_preconditions(round_id)
    by_game = _validate_final_scores(round_, final_scores)
    exact_points, sign_points = get_weights()

    try:
        # Claim the round first: a concurrent settlement blocks here and then
        # finds the pointer already cleared
        if not ActiveRoundPointer.compare_and_swap(round_.id, None):
            raise AlreadySettled()

        # 1. official results
        games = {}
        for game in round_.games:
            game.set_result(*by_game[game.id])
            games[game.id] = game

        # 2. bettor totals, one update per user
        bets = Bet.query.filter(Bet.game_id.in_(list(games))).all()
        deltas, bets_scored = compute_user_deltas(
            games, bets, exact_points, sign_points
        )
        for user_id in sorted(deltas):
            delta = deltas[user_id]
            if not delta:
                continue
            totals = UserTotals.get_or_create(user_id, for_update=True)
            totals.apply(delta)

        # 3. club season stats
        for game in round_.games:
            _apply_club_result(game)

        # 4. close the round for good
        round_.is_active = False
        round_.settled_at = get_utc_time()

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    summary = SettlementSummary(
        round_id=round_.id,
        round_number=round_.number,
        games_settled=len(games),
        bets_scored=bets_scored,
        users_credited=sum(1 for delta in deltas.values() if delta),
    )
    logger.info(
        f"Settled round {summary.round_number}: {summary.games_settled} games, "
        f"{summary.bets_scored} bets, {summary.users_credited} users credited"
    )
    return summary
