"""
Bet ledger: per-user, per-game score predictions for the active round.
"""

import logging

from betpool import db
from betpool.errors import BettingClosed, IncompleteSubmission, NoActiveRound
from betpool.models import ActiveRoundPointer, Bet, Game, UserTotals
from betpool.services.fixture_store import (
    GAMES_PER_ROUND,
    get_active_round,
    is_betting_open,
)
from betpool.utils.scoring import MAX_GOALS

logger = logging.getLogger(__name__)


def _validate_predictions(round_, predictions):
    """
    Check that predictions cover every game of the round exactly once.

    Args:
        round_: the active Round
        predictions: sequence of (game_id, home_goals, away_goals)

    Returns:
        dict mapping game_id to (home_goals, away_goals)
    """
    if predictions is None or len(predictions) != GAMES_PER_ROUND:
        raise IncompleteSubmission()

    by_game = {}
    for game_id, home_goals, away_goals in predictions:
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


def get_open_round(round_id=None, now=None):
    """
    Return the active round if it is accepting bets.

    Raises:
        NoActiveRound, MultipleActiveRounds: betting is unavailable
        BettingClosed: the deadline has passed
    """
    round_ = get_active_round()

    if round_id is not None and round_.id != round_id:
        raise NoActiveRound()

    if not is_betting_open(round_, now):
        raise BettingClosed()

    return round_


def submit(user_id, round_id, predictions, now=None):
    """
    Submit or replace a user's ten predictions for the active round.

    The previous bet set for the round is deleted and the new one inserted in
    one transaction. The active-round pointer is share-locked first, so a
    settlement waits for the bets or the bets see the round closed. The
    user's totals row is locked next so two submissions from the same user
    are applied one after the other.

    Args:
        user_id: bettor
        round_id: round the client believes is active
        predictions: sequence of ten (game_id, home_goals, away_goals)

    Returns:
        list of the stored Bet rows ordered by game position
    """
    round_ = get_open_round(round_id, now)
    by_game = _validate_predictions(round_, predictions)

    try:
        # Settlement swaps the pointer: hold it until these bets are committed
        if ActiveRoundPointer.current_round_id(lock=True) != round_.id:
            raise NoActiveRound()

        # Per-user serialization point
        UserTotals.get_or_create(user_id, for_update=True)

        Bet.query.filter(
            Bet.user_id == user_id, Bet.game_id.in_(round_.game_ids())
        ).delete(synchronize_session="fetch")

        for game in round_.games:
            home_goals, away_goals = by_game[game.id]
            db.session.add(
                Bet(
                    user_id=user_id,
                    game_id=game.id,
                    home_goals=home_goals,
                    away_goals=away_goals,
                )
            )

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"User {user_id} submitted {len(by_game)} bets for round {round_.number}")
    return get_user_bets_for_round(user_id, round_.id)


def get_user_bets_for_round(user_id, round_id):
    """Return the user's bets for a round ordered by game position"""
    return (
        Bet.query.join(Game)
        .filter(Bet.user_id == user_id, Game.round_id == round_id)
        .order_by(Game.position)
        .all()
    )


def round_view_for_user(round_, user_id):
    """Active round as a dictionary with the user's existing bets embedded"""
    bets = {bet.game_id: bet for bet in get_user_bets_for_round(user_id, round_.id)}

    data = round_.to_dict(include_games=False)
    data["games"] = [game.to_dict(bet=bets.get(game.id)) for game in round_.games]
    data["has_bets"] = bool(bets)
    return data
