"""
Fixture store: rounds, their ten games and the single active round.

The active round is tracked twice and both are written in the same
transaction: the ``is_active`` flag on the round row (what readers count)
and the singleton ``ActiveRoundPointer`` row (what writers compare-and-swap).
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from betpool import db
from betpool.errors import (
    InvalidRound,
    InvalidRoundSize,
    MultipleActiveRounds,
    NoActiveRound,
    RoundAlreadyActive,
)
from betpool.models import ActiveRoundPointer, Game, Round, Team
from betpool.utils.cache_utils import cached_query
from betpool.utils.timezone_utils import ensure_utc, get_utc_time

logger = logging.getLogger(__name__)

GAMES_PER_ROUND = 10


def get_active_round():
    """
    Return the unique active round with its games and teams loaded.

    Raises:
        NoActiveRound: no round is active
        MultipleActiveRounds: the single-active-round invariant is broken
    """
    active_rounds = (
        Round.query.filter_by(is_active=True)
        .options(
            joinedload(Round.games).joinedload(Game.home_team),
            joinedload(Round.games).joinedload(Game.away_team),
        )
        .all()
    )

    if not active_rounds:
        raise NoActiveRound()

    if len(active_rounds) > 1:
        logger.error(
            f"Single active round invariant violated: {len(active_rounds)} active rounds "
            f"({', '.join(str(r.number) for r in active_rounds)})"
        )
        raise MultipleActiveRounds(count=len(active_rounds))

    return active_rounds[0]


def is_betting_open(round_, now=None):
    """Bets are accepted strictly before the round's deadline"""
    if now is None:
        now = get_utc_time()
    return ensure_utc(now) < round_.deadline_utc


def _validate_games(games_with_teams):
    if games_with_teams is None or len(games_with_teams) != GAMES_PER_ROUND:
        raise InvalidRoundSize()

    seen = set()
    for home_team_id, away_team_id in games_with_teams:
        if home_team_id is None or away_team_id is None:
            raise InvalidRound("Both teams are required for every game")
        if home_team_id == away_team_id:
            raise InvalidRound("A team cannot play against itself")
        for team_id in (home_team_id, away_team_id):
            if team_id in seen:
                raise InvalidRound(
                    "The same team cannot be selected for more than one game"
                )
            seen.add(team_id)

    known = {
        team_id
        for (team_id,) in db.session.query(Team.id).filter(Team.id.in_(seen)).all()
    }
    missing = sorted(seen - known)
    if missing:
        raise InvalidRound(f"Unknown team id(s): {', '.join(map(str, missing))}")


def open_round(games_with_teams, bets_accepted_by, number=None):
    """
    Create a round of ten games and make it the active round.

    Args:
        games_with_teams: sequence of ten (home_team_id, away_team_id) pairs
        bets_accepted_by: betting deadline (aware datetime, naive means UTC)
        number: round number, defaults to the next free number

    Raises:
        InvalidRoundSize, InvalidRound, RoundAlreadyActive
    """
    _validate_games(games_with_teams)

    if number is None:
        number = Round.next_number()
    elif Round.query.filter_by(number=number).first() is not None:
        raise InvalidRound(f"Round {number} already exists")

    try:
        # Setup shape first, inactive until the pointer swap succeeds
        round_ = Round(
            number=number,
            bets_accepted_by=ensure_utc(bets_accepted_by),
            is_active=False,
        )
        for position, (home_team_id, away_team_id) in enumerate(
            games_with_teams, start=1
        ):
            round_.games.append(
                Game(
                    position=position,
                    home_team_id=home_team_id,
                    away_team_id=away_team_id,
                )
            )
        db.session.add(round_)
        try:
            db.session.flush()
        except IntegrityError:
            # A concurrent open took the same round number and holds the pointer
            raise RoundAlreadyActive()

        if not ActiveRoundPointer.compare_and_swap(None, round_.id):
            raise RoundAlreadyActive()

        round_.is_active = True
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        f"Opened round {round_.number} (id={round_.id}), "
        f"bets accepted until {round_.deadline_utc.isoformat()}"
    )
    return round_


@cached_query("team", timeout=3600)
def list_teams():
    """Reference clubs for the round setup form, ordered by name"""
    return [team.to_dict() for team in Team.get_all()]
