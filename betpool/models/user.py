import hmac
import secrets
from datetime import datetime, timezone

from flask_login import UserMixin

from betpool import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)

    # Bearer token issued outside the pool (see manage.py user create)
    api_token = db.Column(db.String(100), unique=True, nullable=False, index=True)

    # Account status
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    bets = db.relationship(
        "Bet", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    totals = db.relationship(
        "UserTotals",
        backref=db.backref("user", lazy="joined"),
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User {self.username}>"

    @staticmethod
    def generate_token():
        return secrets.token_urlsafe(32)

    @staticmethod
    def create_user(username, is_admin=False):
        """Create a user with a fresh API token"""
        user = User(
            username=username.strip(),
            api_token=User.generate_token(),
            is_active=True,
            is_admin=is_admin,
        )
        db.session.add(user)
        return user

    @staticmethod
    def get_by_token(token):
        """Return the active user owning this token, or None"""
        if not token:
            return None
        user = User.query.filter_by(api_token=token).first()
        if user is None or not user.is_active:
            return None
        # Constant-time comparison of the stored token
        if not hmac.compare_digest(user.api_token, token):
            return None
        return user

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "username": self.username,
            "is_admin": self.is_admin,
        }


class UserTotals(db.Model):
    __tablename__ = "user_totals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True
    )

    guessed_scores = db.Column(db.Integer, nullable=False, default=0)
    guessed_signs = db.Column(db.Integer, nullable=False, default=0)
    points = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<UserTotals user_id={self.user_id} points={self.points}>"

    @staticmethod
    def get_or_create(user_id, for_update=False):
        """Get a user's totals row, creating it on the first submission

        Args:
            user_id: User ID
            for_update: lock the row until the end of the transaction
        """
        query = UserTotals.query.filter_by(user_id=user_id)
        if for_update:
            query = query.with_for_update()

        totals = query.first()
        if totals is None:
            totals = UserTotals(
                user_id=user_id, guessed_scores=0, guessed_signs=0, points=0
            )
            db.session.add(totals)
            db.session.flush()
        return totals

    def apply(self, delta):
        """Add a ScoreDelta to the running totals"""
        self.guessed_scores += delta.guessed_scores
        self.guessed_signs += delta.guessed_signs
        self.points += delta.points

    def to_dict(self):
        """Convert totals to dictionary for API responses"""
        return {
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "guessed_scores": self.guessed_scores,
            "guessed_signs": self.guessed_signs,
            "points": self.points,
        }
