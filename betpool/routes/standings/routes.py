from betpool.routes.standings import bp
from betpool.services import standings
from betpool.utils.responses import envelope


@bp.route("/club")
def club():
    """Club table"""
    return envelope(True, "", standings.club_standings())


@bp.route("/user")
def user():
    """Bettor table"""
    return envelope(True, "", standings.bettor_standings())
