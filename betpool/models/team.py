from datetime import datetime, timezone

from betpool import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True, index=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    season_stats = db.relationship(
        "TeamSeasonStats",
        backref=db.backref("team", lazy="joined"),
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Team {self.name}>"

    @staticmethod
    def create_team(name):
        """Create a club together with its empty season stats row"""
        team = Team(name=name.strip())
        team.season_stats = TeamSeasonStats()
        db.session.add(team)
        return team

    @staticmethod
    def get_all():
        """Get all clubs ordered by name"""
        return Team.query.order_by(Team.name).all()

    def to_dict(self):
        """Convert team to dictionary for API responses"""
        return {"id": self.id, "name": self.name}


class TeamSeasonStats(db.Model):
    __tablename__ = "team_season_stats"

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(
        db.Integer, db.ForeignKey("teams.id"), nullable=False, unique=True
    )

    games_played = db.Column(db.Integer, nullable=False, default=0)
    wins = db.Column(db.Integer, nullable=False, default=0)
    draws = db.Column(db.Integer, nullable=False, default=0)
    losses = db.Column(db.Integer, nullable=False, default=0)
    goals_scored = db.Column(db.Integer, nullable=False, default=0)
    goals_conceded = db.Column(db.Integer, nullable=False, default=0)
    points = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<TeamSeasonStats team_id={self.team_id} points={self.points}>"

    @property
    def goal_difference(self):
        return (self.goals_scored or 0) - (self.goals_conceded or 0)

    @staticmethod
    def get_or_create(team_id):
        """Get the stats row for a club, creating it for clubs seeded without one"""
        stats = TeamSeasonStats.query.filter_by(team_id=team_id).first()
        if stats is None:
            stats = TeamSeasonStats(
                team_id=team_id,
                games_played=0,
                wins=0,
                draws=0,
                losses=0,
                goals_scored=0,
                goals_conceded=0,
                points=0,
            )
            db.session.add(stats)
        return stats

    def to_dict(self):
        """Convert club stats to dictionary for API responses"""
        return {
            "team_id": self.team_id,
            "team": self.team.name if self.team else None,
            "games_played": self.games_played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goals_scored": self.goals_scored,
            "goals_conceded": self.goals_conceded,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }
