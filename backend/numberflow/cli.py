# Overview: Flask CLI command groups for bootstrap, user creation, and the RTS sweep.

# backend/numberflow/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create all tables (idempotent). Prefer `flask db upgrade` once migrations are in use.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
#   List all users with roles and active status.
# - python -m flask users create --email admin@numberflow.local --display-name Admin --password "secret1" --role admin
#   Create a user (prompts if options are omitted). The first user is always admin.
#
# Numbers:
# - python -m flask numbers sweep
#   Run one RTS / safe-custody sweep pass now.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired or revoked sessions older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.auth import ROLES
from .services import session_service
from .services.auth_service import EmailInUseError, PasswordValidationError, UserValidationError, create_user
from .services.sweep_service import run_sweep


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create every table that does not exist yet."""
    db.create_all()
    click.echo("PASS Tables created")
    if not db.session.query(User).first():
        click.echo("INFO No users yet. Run `flask users create` or sign up; the first account becomes admin.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destroying all data')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        return
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users_cli():
    users = db.session.query(User).order_by(User.id).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.email:<32} {user.display_name:<20} {user.role:<9} {status}")


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--display-name', prompt=True, help='Name shown across the dashboard')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password (6+ characters)')
@click.option('--role', type=click.Choice(ROLES), default='employee', show_default=True, help='Role')
@with_appcontext
def create_user_cli(email, display_name, password, role):
    """Create a new user. The first user ever created becomes admin."""
    try:
        user = create_user(email=email, password=password, display_name=display_name, role=role)
    except (EmailInUseError, PasswordValidationError, UserValidationError) as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created user {user.email} ({user.display_name}) with role '{user.role}'")


@click.group('numbers')
def numbers_group():
    """Number inventory commands."""


@numbers_group.command('sweep')
@with_appcontext
def sweep_cli():
    """Run one RTS / safe-custody sweep pass."""
    result = run_sweep()
    click.echo(f"PASS {len(result.rts_transitions)} number(s) became RTS")
    for mobile in result.rts_transitions:
        click.echo(f"     {mobile}")
    click.echo(f"PASS {len(result.safe_custody_notices)} safe custody date(s) arrived")
    for mobile in result.safe_custody_notices:
        click.echo(f"     {mobile}")


@click.group('maintenance')
def maintenance_group():
    """Housekeeping commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} session(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(numbers_group)
    app.cli.add_command(maintenance_group)
