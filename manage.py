#!/usr/bin/env python3
"""
Football Pool Management CLI

This script provides command-line management functionality for the football pool.
"""

import logging
import os

import click
from flask.cli import with_appcontext
from flask_migrate import downgrade, migrate, upgrade
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from betpool import create_app, db, init_db
from betpool.errors import EmptyStandings, PoolError
from betpool.models import Round, Team, User, UserTotals
from betpool.services import fixture_store, standings
from betpool.utils.cache_utils import invalidate_model_cache

app = create_app()


@click.group()
def cli():
    """Football Pool Management CLI"""
    pass


# Team Management Commands
@cli.group()
def team():
    """Club reference data commands"""
    pass


@team.command("add")
@click.argument("names", nargs=-1, required=True)
@with_appcontext
def add_teams(names):
    """Add one or more clubs"""
    try:
        created = []
        for name in names:
            if Team.query.filter_by(name=name.strip()).first():
                click.echo(f"⚠️  Team {name} already exists, skipping")
                continue
            created.append(Team.create_team(name))

        db.session.commit()
        invalidate_model_cache("team")
        click.echo(f"✅ Added {len(created)} team(s)")

    except IntegrityError as e:
        db.session.rollback()
        click.echo("❌ Duplicate team name!")
        logging.error(f"Team creation failed - integrity error: {e}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error adding teams: {str(e)}")
        logging.error(f"Team creation failed - SQL error: {e}")


@team.command("list")
@with_appcontext
def list_teams():
    """List all clubs"""
    teams = Team.get_all()

    if not teams:
        click.echo("No teams found.")
        return

    click.echo("Teams:")
    for t in teams:
        click.echo(f"  {t.id:>4}: {t.name}")


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create")
@click.argument("username")
@click.option("--admin", is_flag=True, help="Grant administrator rights")
@with_appcontext
def create_user(username, admin):
    """Create a user and print its API token"""
    try:
        if User.query.filter_by(username=username).first():
            click.echo(f"❌ User {username} already exists!")
            return

        new_user = User.create_user(username, is_admin=admin)
        db.session.commit()

        role = "admin" if admin else "bettor"
        click.echo(f"✅ Created {role} {username}")
        click.echo(f"   Token: {new_user.api_token}")

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating user: {str(e)}")
        logging.error(f"User creation failed - SQL error: {e}")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.username).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        role = "👑 Admin" if u.is_admin else "Bettor"
        status = "active" if u.is_active else "inactive"
        click.echo(f"  {u.username}: {role} ({status})")


# Round Commands
@cli.group("round")
def round_cmd():
    """Round commands"""
    pass


@round_cmd.command("show")
@with_appcontext
def show_round():
    """Show the active round"""
    try:
        active = fixture_store.get_active_round()
    except PoolError as e:
        click.echo(f"⚠️  {e.message}")
        return

    betting = "open" if fixture_store.is_betting_open(active) else "closed"
    click.echo(
        f"🟢 Round {active.number} - bets accepted by "
        f"{active.deadline_utc.isoformat()} (betting {betting})"
    )
    for game in active.games:
        click.echo(f"  {game.position:>2}. {game.home_team.name} - {game.away_team.name}")


@round_cmd.command("list")
@with_appcontext
def list_rounds():
    """List all rounds"""
    rounds = Round.query.order_by(Round.number.desc()).all()

    if not rounds:
        click.echo("No rounds found.")
        return

    click.echo("Rounds:")
    for r in rounds:
        if r.is_active:
            status = "🟢 ACTIVE"
        elif r.is_settled:
            status = f"✅ Settled {r.settled_at:%Y-%m-%d %H:%M}"
        else:
            status = "⚪ Inactive"
        click.echo(f"  {r.number}: {status}")


# Standings Commands
@cli.group("standings")
def standings_cmd():
    """Standings commands"""
    pass


@standings_cmd.command("clubs")
@with_appcontext
def club_table():
    """Print the club table"""
    try:
        rows = standings.club_standings()
    except EmptyStandings as e:
        click.echo(e.message)
        return

    click.echo(f"{'#':>3}  {'Club':<24}{'P':>4}{'W':>4}{'D':>4}{'L':>4}{'GD':>5}{'Pts':>5}")
    for row in rows:
        click.echo(
            f"{row['rank']:>3}  {row['team']:<24}{row['games_played']:>4}{row['wins']:>4}"
            f"{row['draws']:>4}{row['losses']:>4}{row['goal_difference']:>5}{row['points']:>5}"
        )


@standings_cmd.command("bettors")
@with_appcontext
def bettor_table():
    """Print the bettor table"""
    try:
        rows = standings.bettor_standings()
    except EmptyStandings as e:
        click.echo(e.message)
        return

    click.echo(f"{'#':>3}  {'User':<24}{'Scores':>8}{'Signs':>8}{'Pts':>6}")
    for row in rows:
        click.echo(
            f"{row['rank']:>3}  {row['username']:<24}{row['guessed_scores']:>8}"
            f"{row['guessed_signs']:>8}{row['points']:>6}"
        )


# Database Commands
@cli.group("db")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_database():
    """Initialize database tables and the active-round pointer"""
    try:
        init_db()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        init_db()
        invalidate_model_cache("team")
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Error resetting database: {str(e)}")


# Database Migration Commands
@cli.group()
def db_migrate():
    """Database migration commands"""
    pass


@db_migrate.command()
@with_appcontext
def init_migrations():
    """Initialize migrations repository"""
    if os.path.exists("migrations"):
        click.echo("❌ Migrations directory already exists!")
        return

    from flask_migrate import init as flask_migrate_init

    flask_migrate_init()
    click.echo("✅ Migrations repository initialized!")


@db_migrate.command()
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Create a new migration"""
    migrate(message=message)
    click.echo(f"✅ Migration created: {message}")


@db_migrate.command()
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to database"""
    upgrade(revision=revision)
    click.echo(f"✅ Migrations applied to {revision}")


@db_migrate.command()
@click.option("--revision", required=True, help="Revision to downgrade to")
@with_appcontext
def rollback_migration(revision):
    """Rollback migrations to specific revision"""
    downgrade(revision=revision)
    click.echo(f"✅ Rolled back to {revision}")


# Info Commands
@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("⚽ Football Pool Status")
    click.echo("=" * 40)

    try:
        db.session.execute(db.text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    try:
        active = fixture_store.get_active_round()
        click.echo(f"✅ Active Round: {active.number}")
    except PoolError as e:
        click.echo(f"⚠️  Active Round: {e.message}")

    click.echo(f"⚽ Teams: {Team.query.count()}")
    click.echo(f"👥 Active Users: {User.query.filter_by(is_active=True).count()}")
    click.echo(f"🎯 Bettors: {UserTotals.query.count()}")
    settled = Round.query.filter(Round.settled_at.isnot(None)).count()
    click.echo(f"🏁 Settled Rounds: {settled}")


if __name__ == "__main__":
    with app.app_context():
        cli()
