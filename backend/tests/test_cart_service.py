"""
Cart service tests.

Covers cart uniqueness, the add/merge rule, item updates, price changes
being picked up on read, and cascade deletion.
"""

import pytest

from stockroom.errors import BadRequestError, ConflictError, NotFoundError
from stockroom.extensions import db
from stockroom.models import Cart, CartItem
from stockroom.services import cart_service, products_service


@pytest.fixture
def cart(db_session, store_a, clerk_a):
    return cart_service.create_cart(store_id=store_a.id, user_id=clerk_a.id)


class TestCreateCart:
    def test_new_cart_is_empty(self, cart, store_a, clerk_a):
        assert cart["store_id"] == store_a.id
        assert cart["user_id"] == clerk_a.id
        assert cart["items"] == []
        assert cart["total_prices_cents"] == 0

    def test_second_cart_for_same_store_and_user_conflicts(self, cart, store_a, clerk_a):
        with pytest.raises(ConflictError):
            cart_service.create_cart(store_id=store_a.id, user_id=clerk_a.id)
        assert db.session.query(Cart).filter_by(store_id=store_a.id, user_id=clerk_a.id).count() == 1

    def test_same_user_other_store_allowed(self, cart, store_a2, clerk_a):
        other = cart_service.create_cart(store_id=store_a2.id, user_id=clerk_a.id)
        assert other["id"] != cart["id"]


class TestGetCart:
    def test_by_id_and_by_store_user_match(self, cart, store_a, clerk_a):
        by_id = cart_service.get_cart(cart_id=cart["id"])
        by_pair = cart_service.get_cart(store_id=store_a.id, user_id=clerk_a.id)
        assert by_id == by_pair

    def test_needs_an_identifier(self, db_session):
        with pytest.raises(BadRequestError):
            cart_service.get_cart(store_id=1)

    def test_missing_cart(self, db_session):
        with pytest.raises(NotFoundError):
            cart_service.get_cart(cart_id=999999)


class TestAddProducts:
    def test_add_then_add_again_increments_by_one(self, cart, product_a):
        first = cart_service.add_product(cart["id"], product_a.id, 2)
        assert len(first["items"]) == 1
        assert first["items"][0]["quantity"] == 2
        assert first["items"][0]["total_price_cents"] == 20
        assert first["total_prices_cents"] == 20

        second = cart_service.add_product(cart["id"], product_a.id, 5)
        assert len(second["items"]) == 1
        assert second["items"][0]["quantity"] == 3
        assert second["items"][0]["total_price_cents"] == 30
        assert second["total_prices_cents"] == 30

    def test_items_carry_product_details(self, cart, product_a):
        result = cart_service.add_product(cart["id"], product_a.id, 1)
        details = result["items"][0]["product_details"]
        assert details["name"] == "Widget"
        assert details["unit_price_cents"] == 10

    def test_multi_product_add(self, cart, product_a, product_a_2):
        result = cart_service.add_products(
            cart["id"],
            [
                {"product_id": product_a.id, "quantity": 2},
                {"product_id": product_a_2.id, "quantity": 3},
            ],
        )
        assert [i["product_id"] for i in result["items"]] == [product_a.id, product_a_2.id]
        assert result["total_prices_cents"] == 2 * 10 + 3 * 250

    def test_items_linked_to_cart(self, cart, product_a):
        result = cart_service.add_product(cart["id"], product_a.id, 1)
        row = db.session.get(Cart, cart["id"])
        assert [item.id for item in row.items] == [result["items"][0]["id"]]
        assert result["items"][0]["cart_id"] == cart["id"]

    def test_product_from_other_store_rejected(self, cart, product_a, product_b):
        with pytest.raises(NotFoundError) as exc:
            cart_service.add_products(
                cart["id"],
                [
                    {"product_id": product_a.id, "quantity": 1},
                    {"product_id": product_b.id, "quantity": 1},
                ],
            )
        assert exc.value.details == {"product_ids": [product_b.id]}
        assert db.session.query(CartItem).filter_by(cart_id=cart["id"]).count() == 0

    def test_empty_lines_rejected(self, cart):
        with pytest.raises(BadRequestError):
            cart_service.add_products(cart["id"], [])

    def test_missing_cart(self, product_a):
        with pytest.raises(NotFoundError):
            cart_service.add_product(999999, product_a.id, 1)

    def test_price_change_seen_on_next_read(self, cart, product_a, admin_a):
        cart_service.add_product(cart["id"], product_a.id, 4)
        products_service.update_product(
            product_a.id,
            store_id=product_a.store_id,
            team_id=product_a.team_id,
            user=admin_a,
            patch={"unit_price_cents": 25},
        )

        result = cart_service.get_cart(cart_id=cart["id"])
        assert result["items"][0]["total_price_cents"] == 100
        assert result["total_prices_cents"] == 100


class TestCartItems:
    def test_update_quantity(self, cart, product_a):
        item_id = cart_service.add_product(cart["id"], product_a.id, 1)["items"][0]["id"]
        result = cart_service.update_cart_item(cart["id"], item_id, 7)
        assert result["items"][0]["quantity"] == 7
        assert result["total_prices_cents"] == 70
        assert db.session.get(CartItem, item_id).total_price_cents == 70

    def test_update_without_quantity(self, cart, product_a):
        item_id = cart_service.add_product(cart["id"], product_a.id, 1)["items"][0]["id"]
        with pytest.raises(BadRequestError):
            cart_service.update_cart_item(cart["id"], item_id, None)

    def test_update_missing_item(self, cart):
        with pytest.raises(NotFoundError):
            cart_service.update_cart_item(cart["id"], 999999, 2)

    def test_item_of_another_cart_is_missing(self, cart, product_a, store_a, manager_a):
        other = cart_service.create_cart(store_id=store_a.id, user_id=manager_a.id)
        other_item = cart_service.add_product(other["id"], product_a.id, 1)["items"][0]["id"]
        with pytest.raises(NotFoundError):
            cart_service.delete_cart_item(cart["id"], other_item)

    def test_delete_item(self, cart, product_a, product_a_2):
        result = cart_service.add_products(
            cart["id"],
            [
                {"product_id": product_a.id, "quantity": 1},
                {"product_id": product_a_2.id, "quantity": 1},
            ],
        )
        first_item = result["items"][0]["id"]

        after = cart_service.delete_cart_item(cart["id"], first_item)
        assert [i["product_id"] for i in after["items"]] == [product_a_2.id]
        assert after["total_prices_cents"] == 250
        assert db.session.get(CartItem, first_item) is None


class TestDeleteCart:
    def test_cascade_deletes_items(self, cart, product_a, product_a_2):
        cart_service.add_products(
            cart["id"],
            [
                {"product_id": product_a.id, "quantity": 1},
                {"product_id": product_a_2.id, "quantity": 1},
            ],
        )

        removed = cart_service.delete_cart(cart["id"])

        assert removed == 2
        assert db.session.get(Cart, cart["id"]) is None
        assert db.session.query(CartItem).filter_by(cart_id=cart["id"]).count() == 0

    def test_missing_cart_deletes_nothing(self, cart, product_a):
        cart_service.add_product(cart["id"], product_a.id, 1)

        with pytest.raises(NotFoundError) as exc:
            cart_service.delete_cart(999999)

        assert exc.value.public_message == "Non existing cart"
        assert db.session.query(Cart).count() == 1
        assert db.session.query(CartItem).count() == 1

    def test_deleting_product_removes_its_cart_lines(self, cart, product_a, product_a_2):
        cart_service.add_products(
            cart["id"],
            [
                {"product_id": product_a.id, "quantity": 1},
                {"product_id": product_a_2.id, "quantity": 2},
            ],
        )
        products_service.delete_product(product_a.id, store_id=product_a.store_id, team_id=product_a.team_id)

        result = cart_service.get_cart(cart_id=cart["id"])
        assert [i["quantity"] for i in result["items"]] == [2]
        assert result["total_prices_cents"] == 500
