"""
End-to-end API flows through the Flask test client.
"""

import pytest
from flask import g

from stockroom.errors import NotFoundError
from stockroom.extensions import db
from stockroom.models import Cart, User
from stockroom.services import tenant_service


class TestStores:
    def test_create_update_delete(self, client, admin_headers):
        created = client.post(
            "/api/stores",
            json={"name": "Harbour Store", "description": "By the sea", "address": {"city": "Lisbon", "country": "PT"}},
            headers=admin_headers,
        )
        assert created.status_code == 201
        store = created.json["store"]
        assert store["address"]["city"] == "Lisbon"

        updated = client.patch(f"/api/stores/{store['id']}", json={"description": "Moved inland"}, headers=admin_headers)
        assert updated.status_code == 200
        assert updated.json["store"]["description"] == "Moved inland"

        assert client.delete(f"/api/stores/{store['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/stores/{store['id']}", headers=admin_headers).status_code == 404

    def test_duplicate_name_conflicts(self, client, admin_headers, store_a):
        resp = client.post("/api/stores", json={"name": store_a.name}, headers=admin_headers)
        assert resp.status_code == 409

    def test_short_name_rejected(self, client, admin_headers):
        resp = client.post("/api/stores", json={"name": "Tiny"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "The field name must have 6 characters minimum"

    def test_store_with_products_cannot_be_deleted(self, client, admin_headers, store_a, product_a):
        assert client.delete(f"/api/stores/{store_a.id}", headers=admin_headers).status_code == 409


class TestProducts:
    def test_low_stock(self, client, clerk_headers, store_a, product_a, product_a_2):
        resp = client.get(f"/api/stores/{store_a.id}/products/low-stock", headers=clerk_headers)
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json["items"]] == ["Gadget"]

    def test_pagination(self, client, clerk_headers, store_a, product_a, product_a_2):
        resp = client.get(f"/api/stores/{store_a.id}/products?page=1&per_page=1", headers=clerk_headers)
        assert resp.json["count"] == 1
        assert resp.json["pagination"]["total"] == 2
        assert resp.json["pagination"]["has_next"] is True

    def test_update_quantity_writes_history(self, client, admin_headers, store_a, product_a):
        resp = client.patch(
            f"/api/stores/{store_a.id}/products/{product_a.id}", json={"quantity": 12}, headers=admin_headers
        )
        assert resp.status_code == 200

        histories = client.get(f"/api/histories?product_id={product_a.id}", headers=admin_headers).json["histories"]
        assert histories[0]["evolutions"][-1]["quantity"] == 12

    def test_negative_price_rejected(self, client, admin_headers, store_a, product_a):
        resp = client.patch(
            f"/api/stores/{store_a.id}/products/{product_a.id}", json={"unit_price_cents": -5}, headers=admin_headers
        )
        assert resp.status_code == 400


class TestCartFlow:
    def test_add_twice_then_checkout(self, client, clerk_headers, clerk_a, store_a, product_a):
        created = client.post(f"/api/stores/{store_a.id}/cart", headers=clerk_headers)
        assert created.status_code == 201
        cart_id = created.json["cart"]["id"]

        assert client.post(f"/api/stores/{store_a.id}/cart", headers=clerk_headers).status_code == 409

        first = client.post(
            f"/api/carts/{cart_id}/items", json={"product_id": product_a.id, "quantity": 2}, headers=clerk_headers
        )
        assert first.status_code == 201
        assert first.json["cart"]["total_prices_cents"] == 20

        second = client.post(
            f"/api/carts/{cart_id}/items",
            json={"items": [{"product_id": product_a.id, "quantity": 9}]},
            headers=clerk_headers,
        )
        item = second.json["cart"]["items"][0]
        assert (item["quantity"], item["total_price_cents"]) == (3, 30)
        assert second.json["cart"]["total_prices_cents"] == 30

        checkout = client.post(f"/api/carts/{cart_id}/checkout", headers=clerk_headers)
        assert checkout.status_code == 201
        assert checkout.json["order"]["total_price_cents"] == 30
        assert checkout.json["order"]["ordered_by"] == clerk_a.id

        assert client.get(f"/api/carts/{cart_id}", headers=clerk_headers).status_code == 404
        mine = client.get("/api/users/me/orders", headers=clerk_headers).json
        assert mine["count"] == 1

    def test_update_and_remove_item(self, client, clerk_headers, store_a, product_a):
        cart_id = client.post(f"/api/stores/{store_a.id}/cart", headers=clerk_headers).json["cart"]["id"]
        cart = client.post(
            f"/api/carts/{cart_id}/items", json={"product_id": product_a.id, "quantity": 1}, headers=clerk_headers
        ).json["cart"]
        item_id = cart["items"][0]["id"]

        patched = client.patch(f"/api/carts/{cart_id}/items/{item_id}", json={"quantity": 4}, headers=clerk_headers)
        assert patched.json["cart"]["total_prices_cents"] == 40

        missing_qty = client.patch(f"/api/carts/{cart_id}/items/{item_id}", json={}, headers=clerk_headers)
        assert missing_qty.status_code == 400

        removed = client.delete(f"/api/carts/{cart_id}/items/{item_id}", headers=clerk_headers)
        assert removed.json["cart"]["items"] == []
        assert removed.json["cart"]["total_prices_cents"] == 0

    def test_delete_cart(self, client, clerk_headers, store_a, product_a):
        cart_id = client.post(f"/api/stores/{store_a.id}/cart", headers=clerk_headers).json["cart"]["id"]
        client.post(f"/api/carts/{cart_id}/items", json={"product_id": product_a.id, "quantity": 1}, headers=clerk_headers)

        resp = client.delete(f"/api/carts/{cart_id}", headers=clerk_headers)
        assert resp.status_code == 200
        assert resp.json["items_removed"] == 1
        assert db.session.get(Cart, cart_id) is None


class TestReportsAndGraphics:
    def test_report_roundtrip(self, client, admin_headers, clerk_headers, store_a, product_a):
        order = client.post(
            "/api/orders",
            json={"store_id": store_a.id, "items": [{"product_id": product_a.id, "quantity": 3}]},
            headers=clerk_headers,
        ).json["order"]

        created = client.post(
            "/api/reports",
            json={"store_id": store_a.id, "name": "Daily", "description": "End of day", "orders": [order["id"]]},
            headers=admin_headers,
        )
        assert created.status_code == 201
        report_id = created.json["report_id"]

        report = client.get(f"/api/reports/{report_id}", headers=clerk_headers).json["report"]
        assert report["orders"][0]["order_number"] == order["order_number"]
        assert report["summary"]["total_prices_cents"] == 30
        assert "password_hash" not in report["owner_details"]
        assert "version_id" not in report

        renamed = client.patch(f"/api/reports/{report_id}", json={"name": "Daily close"}, headers=admin_headers)
        assert renamed.json["report"]["name"] == "Daily close"

        assert client.delete(f"/api/reports/{report_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/reports/{report_id}", headers=admin_headers).status_code == 404

    def test_graphic_roundtrip(self, client, admin_headers, store_a, product_a):
        created = client.post(
            "/api/graphics",
            json={"store_id": store_a.id, "name": "Widgets", "description": "Widget stock", "products": [product_a.id]},
            headers=admin_headers,
        )
        assert created.status_code == 201
        graphic_id = created.json["graphic_id"]

        listed = client.get(f"/api/graphics?store_id={store_a.id}", headers=admin_headers).json
        assert listed["count"] == 1
        assert listed["graphics"][0]["histories"][0]["product_name"] == "Widget"

        one = client.get(f"/api/graphics/{graphic_id}", headers=admin_headers).json["graphic"]
        assert one["store_details"]["id"] == store_a.id

    def test_graphics_list_needs_store(self, client, admin_headers):
        resp = client.get("/api/graphics", headers=admin_headers)
        assert resp.status_code == 400

    def test_graphic_without_histories(self, client, admin_headers, store_a, bare_product_a):
        resp = client.post(
            "/api/graphics",
            json={"store_id": store_a.id, "name": "Empty", "products": [bare_product_a.id]},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json["error"] == "Please, make sure all products have histories"


class TestTeamsAndUsers:
    def test_team_read_and_members(self, client, clerk_headers, team_a, admin_a, clerk_a):
        team = client.get(f"/api/teams/{team_a.id}", headers=clerk_headers).json["team"]
        assert team["owner_details"]["id"] == admin_a.id

        members = client.get(f"/api/teams/{team_a.id}/members", headers=clerk_headers).json
        assert {m["id"] for m in members["members"]} == {admin_a.id, clerk_a.id}

    def test_owner_adds_member(self, client, admin_headers, team_a):
        client.post("/api/auth/signup", json={"email": "late@acme.test", "password": "Password123!", "role": "clerk"})
        resp = client.post(f"/api/teams/{team_a.id}/members", json={"email": "late@acme.test"}, headers=admin_headers)
        assert resp.status_code == 201
        assert db.session.query(User).filter_by(email="late@acme.test").one().team_id == team_a.id

    def test_team_with_stores_cannot_be_deleted(self, client, admin_headers, team_a, store_a):
        assert client.delete(f"/api/teams/{team_a.id}", headers=admin_headers).status_code == 409

    def test_user_delete_deactivates(self, client, admin_headers, clerk_a, clerk_headers):
        resp = client.delete(f"/api/users/{clerk_a.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["sessions_revoked"] == 1

        db.session.expire_all()
        assert clerk_a.is_active is False
        assert clerk_a.team_id is None
        assert client.get("/api/auth/me", headers=clerk_headers).status_code == 401

    def test_team_owner_cannot_be_deleted(self, client, admin_headers, admin_a):
        assert client.delete(f"/api/users/{admin_a.id}", headers=admin_headers).status_code == 409


class TestRequestStateBetweenTests:
    def test_service_denial_after_request(self, client, admin_b_headers, store_a, team_b):
        assert client.get("/api/stores", headers=admin_b_headers).status_code == 200

        with pytest.raises(NotFoundError):
            tenant_service.require_store_in_team(store_a.id, team_b.id)

    def test_starts_without_request_user(self, db_session, team_b, store_a):
        # Runs after HTTP tests above; their caller must not carry over
        assert g.get("current_user") is None
        with pytest.raises(NotFoundError):
            tenant_service.require_store_in_team(store_a.id, team_b.id)
