from datetime import datetime, timezone

from betpool import db
from betpool.utils.scoring import derive_sign


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)

    # Game identification
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    position = db.Column(db.Integer, nullable=False)  # 1..10 inside the round

    # Teams
    home_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Official result, written once at settlement
    home_goals = db.Column(db.Integer)
    away_goals = db.Column(db.Integer)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    home_team = db.relationship("Team", foreign_keys=[home_team_id], lazy="joined")
    away_team = db.relationship("Team", foreign_keys=[away_team_id], lazy="joined")
    bets = db.relationship(
        "Bet", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.UniqueConstraint("round_id", "position", name="unique_round_position"),
        db.Index("idx_game_round", "round_id"),
        db.CheckConstraint("home_team_id != away_team_id", name="different_teams"),
        db.CheckConstraint(
            "home_goals IS NULL OR home_goals >= 0", name="non_negative_home_goals"
        ),
        db.CheckConstraint(
            "away_goals IS NULL OR away_goals >= 0", name="non_negative_away_goals"
        ),
    )

    def __repr__(self):
        home = self.home_team.name if self.home_team else "TBD"
        away = self.away_team.name if self.away_team else "TBD"
        return f"<Game {home} vs {away} round_id={self.round_id}>"

    @property
    def is_final(self):
        return self.home_goals is not None and self.away_goals is not None

    @property
    def sign(self):
        """Official outcome, recomputed from the goals on every access"""
        if not self.is_final:
            return None
        return derive_sign(self.home_goals, self.away_goals)

    def set_result(self, home_goals, away_goals):
        """Record the official final score"""
        self.home_goals = home_goals
        self.away_goals = away_goals

    def to_dict(self, bet=None):
        """Convert game to dictionary for API responses

        Args:
            bet: optional Bet of the requesting user, embedded to pre-fill forms
        """
        sign = self.sign
        data = {
            "id": self.id,
            "position": self.position,
            "home_team": self.home_team.to_dict() if self.home_team else None,
            "away_team": self.away_team.to_dict() if self.away_team else None,
            "home_goals": self.home_goals,
            "away_goals": self.away_goals,
            "sign": sign.value if sign else None,
        }

        if bet is not None:
            data["bet"] = bet.to_dict()

        return data
