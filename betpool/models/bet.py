from datetime import datetime, timezone

from betpool import db
from betpool.utils.scoring import derive_sign


class Bet(db.Model):
    __tablename__ = "bets"

    id = db.Column(db.Integer, primary_key=True)

    # Bet identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Prediction
    home_goals = db.Column(db.Integer, nullable=False)
    away_goals = db.Column(db.Integer, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "game_id", name="unique_user_game_bet"),
        db.Index("idx_bet_game", "game_id"),
        db.CheckConstraint(
            "home_goals >= 0 AND away_goals >= 0", name="non_negative_predicted_goals"
        ),
    )

    def __repr__(self):
        return f"<Bet user_id={self.user_id} game_id={self.game_id} {self.home_goals}:{self.away_goals}>"

    @property
    def sign(self):
        return derive_sign(self.home_goals, self.away_goals)

    @property
    def predicted(self):
        return (self.home_goals, self.away_goals)

    def to_dict(self):
        """Convert bet to dictionary for API responses"""
        return {
            "game_id": self.game_id,
            "home_goals": self.home_goals,
            "away_goals": self.away_goals,
            "sign": self.sign.value,
        }
