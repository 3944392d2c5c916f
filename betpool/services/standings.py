"""
Standings aggregator: read-time rankings over persisted totals.

No rank is ever stored; every call sorts the current totals, so a table is
always consistent with the last committed settlement.
"""

from betpool.errors import EmptyStandings
from betpool.models import TeamSeasonStats, UserTotals

NO_CLUBS_MESSAGE = "No teams in database"
NO_BETTORS_MESSAGE = "No users are currently betting"


def rank_clubs(rows):
    """
    Order club rows by points, then goal difference, both descending.

    Python's sort is stable, so clubs that are still level keep their
    input order.
    """
    return sorted(
        rows, key=lambda row: (row["points"], row["goal_difference"]), reverse=True
    )


def rank_bettors(rows):
    """Order bettor rows by points, guessed signs, guessed scores, all descending"""
    return sorted(
        rows,
        key=lambda row: (row["points"], row["guessed_signs"], row["guessed_scores"]),
        reverse=True,
    )


def _with_ranks(rows):
    for rank, row in enumerate(rows, start=1):
        row["rank"] = rank
    return rows


def club_standings():
    """
    Club table.

    Raises:
        EmptyStandings: no club has played a game yet
    """
    stats = TeamSeasonStats.query.order_by(TeamSeasonStats.team_id).all()
    if not any(row.games_played for row in stats):
        raise EmptyStandings(NO_CLUBS_MESSAGE)

    return _with_ranks(rank_clubs([row.to_dict() for row in stats]))


def bettor_standings():
    """
    Bettor table.

    Raises:
        EmptyStandings: nobody has submitted bets yet
    """
    totals = UserTotals.query.order_by(UserTotals.user_id).all()
    if not totals:
        raise EmptyStandings(NO_BETTORS_MESSAGE)

    return _with_ranks(rank_bettors([row.to_dict() for row in totals]))
