"""
CLI command tests (flask system / users / perms).
"""

from stockroom.extensions import db
from stockroom.models import Store, Team, User


def test_perms_check_granted(app):
    result = app.test_cli_runner().invoke(args=["perms", "check", "clerk", "orders", "create"])
    assert result.exit_code == 0
    assert "PASS Role 'clerk' HAS permission 'orders.create'" in result.output


def test_perms_check_denied(app):
    result = app.test_cli_runner().invoke(args=["perms", "check", "clerk", "teams", "create"])
    assert result.exit_code == 0
    assert "does NOT have permission 'teams.create'" in result.output


def test_perms_check_unknown_code(app):
    result = app.test_cli_runner().invoke(args=["perms", "check", "clerk", "invoices", "read"])
    assert result.exit_code != 0
    assert "Unknown permission 'invoices.read'" in result.output


def test_perms_list_for_role(app):
    result = app.test_cli_runner().invoke(args=["perms", "list", "--role", "manager"])
    assert result.exit_code == 0
    assert "stores.delete" in result.output
    assert "teams.create" not in result.output


def test_seed_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["system", "seed", "--password", "Seeded123!"])
    assert first.exit_code == 0, first.output
    assert "DONE Demo data ready" in first.output

    second = runner.invoke(args=["system", "seed", "--password", "Seeded123!"])
    assert second.exit_code == 0, second.output
    assert "SKIP  User exists: admin@stockroom.local" in second.output

    db.session.expire_all()
    assert db.session.query(User).count() == 3
    assert db.session.query(Team).count() == 1
    assert db.session.query(Store).count() == 1
    team = db.session.query(Team).one()
    assert {u.team_id for u in db.session.query(User)} == {team.id}
    assert team.owner.email == "admin@stockroom.local"


def test_users_create(app, db_session, team_a):
    team_id = team_a.id
    result = app.test_cli_runner().invoke(args=[
        "users", "create",
        "--email", "cli@stockroom.local",
        "--username", "cli",
        "--password", "Password123!",
        "--role", "manager",
        "--team-id", str(team_id),
    ])
    assert result.exit_code == 0, result.output

    user = db.session.query(User).filter_by(email="cli@stockroom.local").one()
    assert user.role == "manager"
    assert user.team_id == team_id


def test_users_create_unknown_team(app, db_session):
    result = app.test_cli_runner().invoke(args=[
        "users", "create",
        "--email", "ghost@stockroom.local",
        "--username", "ghost",
        "--password", "Password123!",
        "--role", "clerk",
        "--team-id", "999999",
    ])
    assert result.exit_code != 0
    assert "Team 999999 not found" in result.output


def test_cleanup_sessions(app, db_session):
    result = app.test_cli_runner().invoke(args=["system", "cleanup-sessions", "--older-than-days", "30"])
    assert result.exit_code == 0
    assert "PASS Deleted 0 session(s)" in result.output
