import pytest

from betpool import db
from betpool.errors import EmptyStandings
from betpool.models import Team, UserTotals
from betpool.services import standings


def _bettor(name, points, signs, scores):
    return {
        "username": name,
        "points": points,
        "guessed_signs": signs,
        "guessed_scores": scores,
    }


def _club(name, points, goal_difference):
    return {"team": name, "points": points, "goal_difference": goal_difference}


def test_bettors_level_on_points_are_split_by_signs():
    rows = [_bettor("alice", 10, 4, 2), _bettor("bob", 10, 5, 1)]

    ranked = standings.rank_bettors(rows)

    assert [row["username"] for row in ranked] == ["bob", "alice"]


def test_bettors_level_on_points_and_signs_are_split_by_scores():
    rows = [_bettor("alice", 10, 5, 1), _bettor("bob", 10, 5, 2)]

    assert [row["username"] for row in standings.rank_bettors(rows)] == ["bob", "alice"]


def test_clubs_level_on_points_are_split_by_goal_difference():
    rows = [_club("Arsenal", 9, 3), _club("Chelsea", 9, 1), _club("Fulham", 12, -2)]

    ranked = standings.rank_clubs(rows)

    assert [row["team"] for row in ranked] == ["Fulham", "Arsenal", "Chelsea"]


def test_fully_level_rows_keep_their_order():
    rows = [_club("Everton", 4, 0), _club("Brighton", 4, 0), _club("Wolves", 4, 0)]

    assert [row["team"] for row in standings.rank_clubs(rows)] == [
        "Everton",
        "Brighton",
        "Wolves",
    ]


def test_club_standings_need_teams(app_ctx):
    with pytest.raises(EmptyStandings) as excinfo:
        standings.club_standings()

    assert excinfo.value.message == "No teams in database"


def test_club_standings_need_a_played_game(app_ctx, team_ids):
    with pytest.raises(EmptyStandings):
        standings.club_standings()


def test_bettor_standings_need_a_bettor(app_ctx, users):
    with pytest.raises(EmptyStandings) as excinfo:
        standings.bettor_standings()

    assert excinfo.value.message == "No users are currently betting"


def test_club_table_is_ranked(app_ctx):
    for name, points, scored, conceded in (
        ("Arsenal", 9, 4, 1),
        ("Chelsea", 9, 6, 1),
        ("Fulham", 3, 2, 5),
    ):
        team = Team.create_team(name)
        team.season_stats.games_played = 3
        team.season_stats.points = points
        team.season_stats.goals_scored = scored
        team.season_stats.goals_conceded = conceded
    db.session.commit()

    table = standings.club_standings()

    assert [(row["rank"], row["team"]) for row in table] == [
        (1, "Chelsea"),
        (2, "Arsenal"),
        (3, "Fulham"),
    ]
    assert table[0]["goal_difference"] == 5


def test_bettor_table_is_ranked(app_ctx, users):
    for username, points, signs, scores in (
        ("alice", 10, 4, 2),
        ("bob", 10, 5, 1),
        ("admin", 3, 3, 0),
    ):
        db.session.add(
            UserTotals(
                user_id=users[username].id,
                points=points,
                guessed_signs=signs,
                guessed_scores=scores,
            )
        )
    db.session.commit()

    table = standings.bettor_standings()

    assert [(row["rank"], row["username"]) for row in table] == [
        (1, "bob"),
        (2, "alice"),
        (3, "admin"),
    ]
