from flask import Blueprint

bp = Blueprint("bets", __name__)

from betpool.routes.bets import routes  # noqa: F401, E402
