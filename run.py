from betpool import create_app, db
from betpool.models import Bet, Game, Round, Team, TeamSeasonStats, User, UserTotals

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "UserTotals": UserTotals,
        "Team": Team,
        "TeamSeasonStats": TeamSeasonStats,
        "Round": Round,
        "Game": Game,
        "Bet": Bet,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
