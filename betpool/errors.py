"""
Business conditions raised by the pool services.

Every condition carries a stable, user-facing message. The transport layer
renders them as a ``success: false`` envelope; they never become a 5xx.
Storage failures are not wrapped here and propagate as-is.
"""


class PoolError(Exception):
    """Base class for expected pool conditions"""

    message = "The request could not be completed"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoActiveRound(PoolError):
    message = "There is no active round currently, please come back again later!"


class MultipleActiveRounds(PoolError):
    message = "More than one active round was found"

    def __init__(self, count=None, message=None):
        self.count = count
        super().__init__(message)


class RoundAlreadyActive(PoolError):
    message = "There is already an active round, complete it before opening a new one"


class RoundNotFound(PoolError):
    message = "Round not found"


class BettingClosed(PoolError):
    message = "Sorry, we are no longer accepting bets for this round"


class AlreadySettled(PoolError):
    message = "This round has already been completed"


class IncompleteSubmission(PoolError):
    message = "All scores are required"


class InvalidRoundSize(PoolError):
    message = "A round must contain exactly 10 games"


class InvalidRound(PoolError):
    message = "Invalid round setup"


class EmptyStandings(PoolError):
    message = "Standings are currently empty"
