from datetime import datetime, timezone

from betpool import db

POINTER_ROW_ID = 1


class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.Integer, nullable=False, unique=True, index=True)

    # Betting window
    bets_accepted_by = db.Column(db.DateTime(timezone=True), nullable=False)

    # Status
    is_active = db.Column(db.Boolean, nullable=False, default=False)
    settled_at = db.Column(db.DateTime(timezone=True))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    games = db.relationship(
        "Game",
        backref="round",
        order_by="Game.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (db.Index("idx_round_active", "is_active"),)

    def __repr__(self):
        return f"<Round {self.number} active={self.is_active}>"

    @property
    def is_settled(self):
        return self.settled_at is not None

    @property
    def deadline_utc(self):
        """Betting deadline as an aware UTC datetime"""
        deadline = self.bets_accepted_by
        # SQLite hands back naive datetimes; they are stored in UTC
        if deadline is not None and deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        return deadline

    @staticmethod
    def next_number():
        """Next free round number, starting at 1"""
        highest = db.session.query(db.func.max(Round.number)).scalar()
        return (highest or 0) + 1

    def game_ids(self):
        return [game.id for game in self.games]

    def to_dict(self, include_games=True):
        """Convert round to dictionary for API responses"""
        data = {
            "id": self.id,
            "round": self.number,
            "bets_accepted_by": (
                self.deadline_utc.isoformat() if self.bets_accepted_by else None
            ),
            "is_active": self.is_active,
            "settled_at": self.settled_at.isoformat() if self.settled_at else None,
        }

        if include_games:
            data["games"] = [game.to_dict() for game in self.games]

        return data


class ActiveRoundPointer(db.Model):
    """Single row naming the active round; changed only by compare-and-swap"""

    __tablename__ = "active_round_pointer"

    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=True)

    __table_args__ = (
        db.CheckConstraint(f"id = {POINTER_ROW_ID}", name="single_pointer_row"),
    )

    def __repr__(self):
        return f"<ActiveRoundPointer round_id={self.round_id}>"

    @staticmethod
    def ensure_exists():
        """Create the pointer row on a fresh database"""
        pointer = db.session.get(ActiveRoundPointer, POINTER_ROW_ID)
        if pointer is None:
            pointer = ActiveRoundPointer(id=POINTER_ROW_ID, round_id=None)
            db.session.add(pointer)
        return pointer

    @staticmethod
    def compare_and_swap(expected_round_id, new_round_id):
        """
        Point at new_round_id only if the pointer currently holds expected_round_id.

        Returns:
            bool: True if this call performed the swap
        """
        query = ActiveRoundPointer.query.filter(
            ActiveRoundPointer.id == POINTER_ROW_ID
        )
        if expected_round_id is None:
            query = query.filter(ActiveRoundPointer.round_id.is_(None))
        else:
            query = query.filter(ActiveRoundPointer.round_id == expected_round_id)

        updated = query.update(
            {"round_id": new_round_id}, synchronize_session=False
        )
        return updated == 1

    @staticmethod
    def current_round_id(lock=False):
        """Round id held by the pointer, share-locked until commit when lock is set"""
        query = db.session.query(ActiveRoundPointer.round_id).filter(
            ActiveRoundPointer.id == POINTER_ROW_ID
        )
        if lock:
            query = query.with_for_update(read=True)
        return query.scalar()
