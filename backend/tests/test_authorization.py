"""
Authorization tests over HTTP.

Verifies:
- Unauthenticated requests return 401
- Clerk role denied management operations (403)
- Ownership rules on teams and stores
- Session lifecycle (logout, admin invalidation)
"""

import pytest

from stockroom.extensions import db
from stockroom.models import Order
from stockroom.services import order_service

from conftest import PASSWORD, auth_headers, get_auth_token


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/logout"),
            ("GET", "/api/teams"),
            ("POST", "/api/teams"),
            ("GET", "/api/users"),
            ("GET", "/api/stores"),
            ("POST", "/api/stores"),
            ("GET", "/api/stores/1/products"),
            ("POST", "/api/stores/1/cart"),
            ("GET", "/api/carts/1"),
            ("POST", "/api/carts/1/checkout"),
            ("GET", "/api/orders"),
            ("GET", "/api/reports"),
            ("GET", "/api/graphics?store_id=1"),
            ("GET", "/api/histories"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["error"] == "Authentication required"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/stores", headers=auth_headers("not-a-real-token"))
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"

    def test_health_is_public(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"

    def test_version_endpoint_removed(self, client, db_session):
        assert client.get("/api/version").status_code == 404


# =============================================================================
# LOGIN / SIGNUP / SESSIONS
# =============================================================================


class TestAuthFlow:
    def test_login_returns_token_and_permissions(self, client, clerk_a):
        resp = client.post("/api/auth/login", json={"email": clerk_a.email, "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json["token"]
        assert resp.json["team_id"] == clerk_a.team_id
        assert "carts.create" in resp.json["permissions"]
        assert "password_hash" not in resp.json["user"]

    def test_wrong_password(self, client, clerk_a):
        resp = client.post("/api/auth/login", json={"email": clerk_a.email, "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid credentials"

    def test_missing_fields(self, client, db_session):
        assert client.post("/api/auth/login", json={"email": "x@y.z"}).status_code == 400

    def test_signup_then_create_team(self, client, db_session):
        resp = client.post(
            "/api/auth/signup",
            json={"email": "New.Owner@Example.com", "password": PASSWORD, "role": "admin", "username": "owner"},
        )
        assert resp.status_code == 201
        assert resp.json["user"]["email"] == "new.owner@example.com"
        assert resp.json["team_id"] is None
        headers = auth_headers(resp.json["token"])

        # No team yet: team-scoped resources are refused
        assert client.get("/api/stores", headers=headers).status_code == 401

        created = client.post("/api/teams", json={"name": "New Team", "description": "Fresh tenant"}, headers=headers)
        assert created.status_code == 201
        team_id = created.json["team"]["id"]

        # Team context is picked up on the next request with the same token
        me = client.get("/api/auth/me", headers=headers)
        assert me.json["team_id"] == team_id
        assert client.get("/api/stores", headers=headers).status_code == 200

    def test_signup_requires_role(self, client, db_session):
        resp = client.post("/api/auth/signup", json={"email": "a@b.co", "password": PASSWORD})
        assert resp.status_code == 400

    def test_signup_duplicate_email(self, client, clerk_a):
        resp = client.post(
            "/api/auth/signup", json={"email": clerk_a.email, "password": PASSWORD, "role": "clerk"}
        )
        assert resp.status_code == 409

    def test_signup_short_password(self, client, db_session):
        resp = client.post("/api/auth/signup", json={"email": "a@b.co", "password": "123", "role": "clerk"})
        assert resp.status_code == 400
        assert "6 characters minimum" in resp.json["error"]

    def test_logout_revokes_token(self, client, clerk_headers):
        assert client.post("/api/auth/logout", headers=clerk_headers).status_code == 200
        assert client.get("/api/auth/me", headers=clerk_headers).status_code == 401

    def test_admin_invalidates_user_sessions(self, client, admin_headers, clerk_a, clerk_headers):
        resp = client.post("/api/auth/invalidate-token", json={"user_id": clerk_a.id}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["sessions_revoked"] == 1
        assert client.get("/api/auth/me", headers=clerk_headers).status_code == 401

    def test_non_admin_cannot_invalidate(self, client, manager_headers, clerk_a):
        resp = client.post("/api/auth/invalidate-token", json={"user_id": clerk_a.id}, headers=manager_headers)
        assert resp.status_code == 403
        assert resp.json["error"] == "Admin access required"


# =============================================================================
# ROLE DENIALS - 403
# =============================================================================


class TestClerkDenied:
    """Clerk role cannot perform management operations."""

    def test_cannot_create_product(self, client, clerk_headers, store_a):
        resp = client.post(
            f"/api/stores/{store_a.id}/products",
            json={"name": "Sneaky", "quantity": 1, "unit_price_cents": 100},
            headers=clerk_headers,
        )
        assert resp.status_code == 403
        assert resp.json["details"]["required_permission"] == "products.create"

    def test_cannot_create_store(self, client, clerk_headers):
        resp = client.post("/api/stores", json={"name": "Clerk Store"}, headers=clerk_headers)
        assert resp.status_code == 403

    def test_cannot_delete_order(self, client, clerk_headers, team_a, store_a, clerk_a, product_a):
        order = order_service.create_order(
            team_id=team_a.id, store_id=store_a.id, user_id=clerk_a.id,
            lines=[{"product_id": product_a.id, "quantity": 1}],
        )
        order_id = order.id
        resp = client.delete(f"/api/orders/{order_id}", headers=clerk_headers)
        assert resp.status_code == 403
        assert db.session.get(Order, order_id) is not None

    def test_cannot_create_report(self, client, clerk_headers, store_a):
        resp = client.post(
            "/api/reports",
            json={"store_id": store_a.id, "name": "Nope", "orders": [1]},
            headers=clerk_headers,
        )
        assert resp.status_code == 403

    def test_can_read_products(self, client, clerk_headers, store_a, product_a):
        resp = client.get(f"/api/stores/{store_a.id}/products", headers=clerk_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 1


class TestOwnership:
    def test_manager_cannot_create_team(self, client, manager_headers):
        resp = client.post("/api/teams", json={"name": "Side Team"}, headers=manager_headers)
        assert resp.status_code == 403

    def test_only_store_owner_adds_products(self, client, manager_headers, store_a):
        # Manager has products.create but does not own store_a
        resp = client.post(
            f"/api/stores/{store_a.id}/products",
            json={"name": "Managed", "quantity": 1, "unit_price_cents": 100},
            headers=manager_headers,
        )
        assert resp.status_code == 403
        assert resp.json["error"] == "Only the store owner can do this"

    def test_store_owner_adds_products(self, client, admin_headers, store_a):
        resp = client.post(
            f"/api/stores/{store_a.id}/products",
            json={"name": "Owned", "quantity": 4, "unit_price_cents": 100},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["product"]["quantity"] == 4

    def test_admin_owner_cannot_create_second_team(self, client, admin_headers):
        resp = client.post("/api/teams", json={"name": "Second Team"}, headers=admin_headers)
        assert resp.status_code == 409

    def test_clerk_cannot_edit_another_user(self, client, clerk_headers, manager_a):
        resp = client.patch(f"/api/users/{manager_a.id}", json={"username": "renamed"}, headers=clerk_headers)
        assert resp.status_code == 403

    def test_clerk_edits_own_profile(self, client, clerk_headers, clerk_a):
        resp = client.patch(f"/api/users/{clerk_a.id}", json={"username": "floor-1"}, headers=clerk_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["username"] == "floor-1"

    def test_password_change_needs_current_password(self, client, clerk_headers, clerk_a):
        resp = client.patch(f"/api/users/{clerk_a.id}", json={"password": "brand-new-pass"}, headers=clerk_headers)
        assert resp.status_code == 400

        resp = client.patch(
            f"/api/users/{clerk_a.id}",
            json={"password": "brand-new-pass", "current_password": PASSWORD},
            headers=clerk_headers,
        )
        assert resp.status_code == 200
        assert get_auth_token(client, clerk_a.email, "brand-new-pass")

    def test_only_admins_change_roles(self, client, manager_headers, manager_a):
        resp = client.patch(f"/api/users/{manager_a.id}", json={"role": "admin"}, headers=manager_headers)
        assert resp.status_code == 403
