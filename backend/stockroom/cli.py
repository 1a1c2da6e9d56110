# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (use `flask db upgrade` for migrated databases).
# - python -m flask system seed [--password "Password123!"]
#   Idempotent demo data: admin (team owner), manager and clerk users, one team, one store.
# - python -m flask system cleanup-sessions --older-than-days 30
#   Delete expired and revoked sessions past the retention window.
#
# User bootstrap:
# - python -m flask users create --email admin@stockroom.local --username admin --password "Password123!" --role admin
#   Create a user (prompts if options are omitted).
#
# Permission inspection:
# - python -m flask perms list [--role clerk]
#   List permission codes (optionally those granted to a role).
# - python -m flask perms check clerk orders create
#   Check whether a role is granted resource.action.

import click
from flask.cli import with_appcontext

from .errors import StockroomError
from .extensions import db
from .models import Store, Team, User
from .permissions import (
    PERMISSION_DEFINITIONS,
    UserRole,
    get_role_permission_codes,
    has_permission,
    permission_code,
    validate_permission_code,
)
from .services import auth_service, session_service

DEFAULT_PASSWORD = "Password123!"

SEED_USERS = (
    ("admin", "admin@stockroom.local", UserRole.ADMIN),
    ("manager", "manager@stockroom.local", UserRole.MANAGER),
    ("clerk", "clerk@stockroom.local", UserRole.CLERK),
)


@click.group('system')
def system_group():
    """System bootstrap and maintenance commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('seed')
@click.option('--password', default=DEFAULT_PASSWORD, show_default=True, help='Password for seeded users')
@click.option('--team-name', default='Demo Team', show_default=True, help='Team name')
@click.option('--store-name', default='Main Store', show_default=True, help='Store name')
@with_appcontext
def seed(password, team_name, store_name):
    """
    Seed demo data: admin/manager/clerk users, a team owned by the admin, one store.

    Safe to run more than once; existing rows are reused.
    SECURITY: Change passwords immediately outside development!
    """
    click.echo("START Seeding demo data...")

    users = {}
    for username, email, role in SEED_USERS:
        user = db.session.query(User).filter_by(email=email).first()
        if user:
            click.echo(f"SKIP  User exists: {email}")
        else:
            try:
                user = auth_service.create_user(email=email, password=password, role=role, username=username)
            except StockroomError as e:
                raise click.ClickException(f"Failed to create user '{email}': {e.public_message}")
            click.echo(f"PASS Created user: {username} ({email}) with role '{role}'")
        users[role] = user

    owner = users[UserRole.ADMIN]
    team = db.session.query(Team).filter_by(owner_id=owner.id).first()
    if not team:
        team = Team(name=team_name, description="Seeded demo team", owner_id=owner.id)
        db.session.add(team)
        db.session.flush()
        click.echo(f"PASS Created team: {team.name} (ID: {team.id})")
    for user in users.values():
        if user.team_id is None:
            user.team_id = team.id

    store = db.session.query(Store).filter_by(team_id=team.id, name=store_name).first()
    if not store:
        store = Store(team_id=team.id, owner_id=owner.id, name=store_name, description="Seeded demo store")
        db.session.add(store)
        db.session.flush()
        click.echo(f"PASS Created store: {store.name} (ID: {store.id})")

    db.session.commit()

    click.echo("\n" + "=" * 60)
    click.echo("DONE Demo data ready")
    click.echo("=" * 60)
    click.echo(f"\nTeam: {team.name} (ID: {team.id})")
    click.echo(f"Store: {store.name} (ID: {store.id})")
    click.echo("\nCredentials (CHANGE OUTSIDE DEVELOPMENT!):")
    for _, email, role in SEED_USERS:
        click.echo(f"   {role:<8} -> {email}")
    click.echo("")


@system_group.command('cleanup-sessions')
@click.option('--older-than-days', type=int, default=30, show_default=True, help='Retention window in days')
@with_appcontext
def cleanup_sessions(older_than_days):
    """Delete expired and revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(older_than_days=older_than_days)
    click.echo(f"PASS Deleted {deleted} session(s)")


# =============================================================================
# USER COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(UserRole.ALL)), prompt=True, help='Role')
@click.option('--team-id', type=int, help='Team to join (optional)')
@with_appcontext
def create_user_cli(email, username, password, role, team_id):
    """Create a user."""
    if team_id is not None and not db.session.get(Team, team_id):
        raise click.ClickException(f"Team {team_id} not found")
    try:
        user = auth_service.create_user(
            email=email, password=password, role=role, username=username, team_id=team_id
        )
    except StockroomError as e:
        raise click.ClickException(e.public_message)
    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}' (ID: {user.id})")


# =============================================================================
# PERMISSION COMMANDS
# =============================================================================

@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(list(UserRole.ALL)), help='Only codes granted to this role')
def list_permissions_cli(role):
    """List permission codes, optionally those granted to a role."""
    if role:
        codes = sorted(get_role_permission_codes(role))
        click.echo(f"\nPermissions for role: {role.upper()}")
        click.echo("-" * 60)
        for code in codes:
            click.echo(code)
        click.echo(f"\n Total: {len(codes)} permissions\n")
        return

    click.echo(f"{'Code':<22} {'Name':<28} {'Resource'}")
    click.echo("-" * 60)
    for code, name, _description, resource in PERMISSION_DEFINITIONS:
        click.echo(f"{code:<22} {name:<28} {resource}")
    click.echo(f"\n Total: {len(PERMISSION_DEFINITIONS)} permissions\n")


@perms_group.command('check')
@click.argument('role', type=click.Choice(list(UserRole.ALL)))
@click.argument('resource')
@click.argument('action')
def check_permission_cli(role, resource, action):
    """Check whether ROLE is granted RESOURCE.ACTION."""
    code = permission_code(resource, action)
    if not validate_permission_code(code):
        raise click.ClickException(f"Unknown permission '{code}'")

    if has_permission(role, resource, action):
        click.echo(f"PASS Role '{role}' HAS permission '{code}'")
    else:
        click.echo(f"FAIL Role '{role}' does NOT have permission '{code}'")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
