"""
Pytest fixtures for Stockroom backend tests.

Provides test database setup, two isolated teams (A and B) with their
users, stores and products, a test client, and login helpers.
"""

import pytest

from stockroom import create_app
from stockroom.config import TestingConfig
from stockroom.extensions import db
from stockroom.models import Team, Store, Product
from stockroom.permissions import UserRole
from stockroom.services import auth_service, products_service

PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """
    Create fresh database for each test.

    Each test runs in its own app context: test-client requests reuse it,
    so g and the scoped session never leak from one test into the next.
    """
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        db.session.remove()


def make_user(email: str, role: str, team_id: int | None = None, username: str | None = None):
    return auth_service.create_user(
        email=email,
        password=PASSWORD,
        role=role,
        username=username or email.split("@", 1)[0],
        team_id=team_id,
    )


def make_team(owner, name: str) -> Team:
    """Team owned by `owner`, who joins it."""
    team = Team(name=name, description=f"{name} description", owner_id=owner.id)
    db.session.add(team)
    db.session.flush()
    owner.team_id = team.id
    db.session.commit()
    return team


# =============================================================================
# TEAM A
# =============================================================================

@pytest.fixture(scope='function')
def admin_a(db_session):
    """Admin of team A (team and store owner)."""
    return make_user("admin_a@acme.test", UserRole.ADMIN)


@pytest.fixture(scope='function')
def team_a(db_session, admin_a):
    """Team A - Acme Corp."""
    return make_team(admin_a, "Acme Corp")


@pytest.fixture(scope='function')
def manager_a(db_session, team_a):
    return make_user("manager_a@acme.test", UserRole.MANAGER, team_id=team_a.id)


@pytest.fixture(scope='function')
def clerk_a(db_session, team_a):
    return make_user("clerk_a@acme.test", UserRole.CLERK, team_id=team_a.id)


@pytest.fixture(scope='function')
def store_a(db_session, team_a, admin_a):
    """Store A1 in team A, owned by admin_a."""
    store = Store(team_id=team_a.id, owner_id=admin_a.id, name="Acme Store One", description="Main shop")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def store_a2(db_session, team_a, admin_a):
    """Second store in team A."""
    store = Store(team_id=team_a.id, owner_id=admin_a.id, name="Acme Store Two", description="Outlet")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def product_a(db_session, store_a, team_a, admin_a):
    """Product in store A, unit price 10 cents, with its first history reading."""
    return products_service.create_product(
        patch={"name": "Widget", "quantity": 50, "min_quantity": 5, "unit_price_cents": 10},
        store_id=store_a.id,
        team_id=team_a.id,
        owner=admin_a,
    )


@pytest.fixture(scope='function')
def product_a_2(db_session, store_a, team_a, admin_a):
    """Second product in store A, unit price 250 cents."""
    return products_service.create_product(
        patch={"name": "Gadget", "quantity": 3, "min_quantity": 5, "unit_price_cents": 250},
        store_id=store_a.id,
        team_id=team_a.id,
        owner=admin_a,
    )


# =============================================================================
# TEAM B
# =============================================================================

@pytest.fixture(scope='function')
def admin_b(db_session):
    """Admin of team B."""
    return make_user("admin_b@beta.test", UserRole.ADMIN)


@pytest.fixture(scope='function')
def team_b(db_session, admin_b):
    """Team B - Beta Inc."""
    return make_team(admin_b, "Beta Inc")


@pytest.fixture(scope='function')
def store_b(db_session, team_b, admin_b):
    """Store in team B."""
    store = Store(team_id=team_b.id, owner_id=admin_b.id, name="Beta Store One", description="Beta shop")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def product_b(db_session, store_b, team_b, admin_b):
    """Product in store B."""
    return products_service.create_product(
        patch={"name": "Beta Widget", "quantity": 20, "unit_price_cents": 2000},
        store_id=store_b.id,
        team_id=team_b.id,
        owner=admin_b,
    )


@pytest.fixture(scope='function')
def bare_product_a(db_session, store_a, team_a, admin_a):
    """Product inserted without going through the service (no history)."""
    product = Product(
        team_id=team_a.id,
        store_id=store_a.id,
        owner_id=admin_a.id,
        name="Untracked",
        quantity=1,
        unit_price_cents=100,
    )
    db_session.add(product)
    db_session.commit()
    return product


# =============================================================================
# HTTP HELPERS
# =============================================================================

def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_a, team_a):
    return auth_headers(get_auth_token(client, admin_a.email))


@pytest.fixture(scope='function')
def manager_headers(client, manager_a):
    return auth_headers(get_auth_token(client, manager_a.email))


@pytest.fixture(scope='function')
def clerk_headers(client, clerk_a):
    return auth_headers(get_auth_token(client, clerk_a.email))


@pytest.fixture(scope='function')
def admin_b_headers(client, admin_b, team_b):
    return auth_headers(get_auth_token(client, admin_b.email))
