from betpool import db  # noqa: F401 - imported for model imports

from .bet import Bet
from .game import Game
from .round import ActiveRoundPointer, Round
from .team import Team, TeamSeasonStats
from .user import User, UserTotals

__all__ = [
    "User",
    "UserTotals",
    "Team",
    "TeamSeasonStats",
    "Round",
    "ActiveRoundPointer",
    "Game",
    "Bet",
]
