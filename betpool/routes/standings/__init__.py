from flask import Blueprint

bp = Blueprint("standings", __name__)

from betpool.routes.standings import routes  # noqa: F401, E402
