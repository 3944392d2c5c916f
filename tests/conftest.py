from datetime import timedelta
from types import SimpleNamespace

import pytest

from betpool import create_app, db
from betpool.models import Team, User
from betpool.services import fixture_store
from betpool.utils.timezone_utils import get_utc_time

CLUB_NAMES = [
    "Arsenal",
    "Aston Villa",
    "Bournemouth",
    "Brentford",
    "Brighton",
    "Chelsea",
    "Crystal Palace",
    "Everton",
    "Fulham",
    "Ipswich",
    "Leicester",
    "Liverpool",
    "Manchester City",
    "Manchester United",
    "Newcastle",
    "Nottingham Forest",
    "Southampton",
    "Tottenham",
    "West Ham",
    "Wolves",
]

# Official results used by most settlement tests, one per game position
FINAL_SCORES = [
    (2, 1),
    (0, 0),
    (1, 3),
    (2, 2),
    (4, 0),
    (0, 1),
    (1, 1),
    (3, 2),
    (0, 2),
    (1, 0),
]

# Correct sign on the first two games only, wrong sign everywhere else
SIGN_ONLY_GUESSES = [
    (3, 0),
    (1, 1),
    (2, 0),
    (1, 0),
    (0, 1),
    (1, 0),
    (0, 1),
    (0, 0),
    (1, 1),
    (0, 3),
]


@pytest.fixture
def app():
    """Fresh application with an empty in-memory database"""
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    """Application context for tests that call services directly"""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def team_ids(app):
    with app.app_context():
        teams = [Team.create_team(name) for name in CLUB_NAMES]
        db.session.commit()
        return [team.id for team in teams]


@pytest.fixture
def users(app):
    """An administrator and two bettors, keyed by username"""
    with app.app_context():
        created = [
            User.create_user("admin", is_admin=True),
            User.create_user("alice"),
            User.create_user("bob"),
        ]
        db.session.commit()
        return {
            user.username: SimpleNamespace(id=user.id, token=user.api_token)
            for user in created
        }


@pytest.fixture
def auth_headers():
    def build(user):
        return {"Authorization": f"Bearer {user.token}"}

    return build


@pytest.fixture
def game_pairs(team_ids):
    """Ten (home, away) pairs using every seeded club once"""
    return list(zip(team_ids[0::2], team_ids[1::2]))


@pytest.fixture
def open_round(app, game_pairs):
    """Active round with a deadline two days ahead"""
    with app.app_context():
        round_ = fixture_store.open_round(
            game_pairs, get_utc_time() + timedelta(days=2)
        )
        return SimpleNamespace(
            id=round_.id,
            number=round_.number,
            game_ids=round_.game_ids(),
            pairs=game_pairs,
        )


@pytest.fixture
def as_tuples():
    """Zip game ids with scores into (game_id, home_goals, away_goals)"""

    def build(game_ids, scores):
        return [(game_id, home, away) for game_id, (home, away) in zip(game_ids, scores)]

    return build


@pytest.fixture
def as_payload():
    """Zip game ids with scores into the JSON list the clients post"""

    def build(game_ids, scores):
        return [
            {"game_id": game_id, "home_goals": home, "away_goals": away}
            for game_id, (home, away) in zip(game_ids, scores)
        ]

    return build


@pytest.fixture
def final_scores():
    return list(FINAL_SCORES)


@pytest.fixture
def sign_only_guesses():
    return list(SIGN_ONLY_GUESSES)
