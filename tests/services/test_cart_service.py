"""Cart Store: add/merge with frozen prices, removal and summaries."""
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from storefront.data.models import CartItemModel, CartModel, ProductModel
from storefront.domain.errors import (
    InsufficientStock,
    InvalidQuantity,
    NotFound,
    TransactionFailure,
    Unavailable,
)
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService


class TestAddOrMergeItem:

    def test_first_add_creates_cart_and_item(self, db, make_user, make_product):
        user = make_user()
        product = make_product(price="10.00", stock=3)

        result = CartService(db).add_or_merge_item(user.id, product.id, 2)

        assert result["created"] is True
        assert result["cart_item"]["quantity"] == 2
        assert result["cart_item"]["price"] == Decimal("10.00")
        assert result["cart_summary"]["total_items"] == 2
        assert result["cart_summary"]["total_price"] == Decimal("20.00")
        assert result["cart_summary"]["status"] == "ACTIVE"

    def test_merge_adds_quantity_and_refreshes_price(self, db, make_user, make_product):
        user = make_user()
        product = make_product(price="10.00", stock=10)
        svc = CartService(db)

        svc.add_or_merge_item(user.id, product.id, 2)

        product.discount_type = "percent"
        product.discount_value = Decimal("50")
        db.commit()

        result = svc.add_or_merge_item(user.id, product.id, 2)

        assert result["created"] is False
        assert result["cart_item"]["quantity"] == 4
        assert result["cart_item"]["price"] == Decimal("5.00")
        assert db.execute(select(func.count()).select_from(CartItemModel)).scalar_one() == 1

    def test_price_is_frozen_with_discount(self, db, make_user, make_product):
        user = make_user()
        product = make_product(price="100.00", discount_type="amount", discount_value="15")

        result = CartService(db).add_or_merge_item(user.id, product.id, 1)

        assert result["cart_item"]["price"] == Decimal("85.00")

    def test_merge_over_stock_keeps_existing_quantity(self, db, make_user, make_product):
        user = make_user()
        product = make_product(title="Product A", price="10", stock=3)
        svc = CartService(db)

        svc.add_or_merge_item(user.id, product.id, 2)

        with pytest.raises(InsufficientStock) as exc:
            svc.add_or_merge_item(user.id, product.id, 2)

        assert exc.value.in_cart == 2
        assert exc.value.available == 3
        item = db.execute(select(CartItemModel)).scalar_one()
        assert item.quantity == 2

    def test_new_item_over_stock(self, db, make_user, make_product):
        user = make_user()
        product = make_product(stock=1)

        with pytest.raises(InsufficientStock, match="Only 1 available"):
            CartService(db).add_or_merge_item(user.id, product.id, 2)

    def test_inactive_product_rejected(self, db, make_user, make_product):
        user = make_user()
        product = make_product(stock=0, status="OUT_OF_STOCK", title="Vase")

        with pytest.raises(Unavailable, match="Vase"):
            CartService(db).add_or_merge_item(user.id, product.id, 1)

    def test_missing_product(self, db, make_user):
        user = make_user()
        with pytest.raises(NotFound):
            CartService(db).add_or_merge_item(user.id, 12345, 1)

    def test_failed_first_add_leaves_no_cart(self, db, make_user, make_product):
        user = make_user()
        product = make_product(stock=1)

        with pytest.raises(InsufficientStock):
            CartService(db).add_or_merge_item(user.id, product.id, 5)

        assert db.execute(select(func.count()).select_from(CartModel)).scalar_one() == 0

    @pytest.mark.parametrize("quantity", [0, -1, 101, 2.5, "3", True, None])
    def test_invalid_quantity(self, db, make_user, make_product, quantity):
        user = make_user()
        product = make_product()

        with pytest.raises(InvalidQuantity):
            CartService(db).add_or_merge_item(user.id, product.id, quantity)

    def test_quantity_bounds_are_inclusive(self, db, make_user, make_product):
        user = make_user()
        product = make_product(stock=200)
        svc = CartService(db)

        assert svc.add_or_merge_item(user.id, product.id, 1)["cart_item"]["quantity"] == 1
        other = make_product(title="Other", stock=200)
        assert svc.add_or_merge_item(user.id, other.id, 100)["cart_item"]["quantity"] == 100

    def test_ordered_cart_is_reactivated(self, db, make_user, make_product):
        user = make_user()
        product = make_product()
        db.add(CartModel(user_id=user.id, status="ORDERED"))
        db.commit()

        result = CartService(db).add_or_merge_item(user.id, product.id, 1)

        assert result["cart_summary"]["status"] == "ACTIVE"
        carts = db.execute(select(CartModel).where(CartModel.user_id == user.id)).scalars().all()
        assert len(carts) == 1


class TestRemoveItem:

    def test_removes_item(self, db, make_user, make_product):
        user = make_user()
        product = make_product()
        svc = CartService(db)
        item_id = svc.add_or_merge_item(user.id, product.id, 1)["cart_item"]["id"]

        assert svc.remove_item(item_id) == {"id": item_id, "deleted": True}
        assert svc.get_cart_summary(user.id)["items"] == []

    def test_missing_item(self, db):
        with pytest.raises(NotFound):
            CartService(db).remove_item(42)

    def test_ownership_checked_when_user_given(self, db, make_user, make_product):
        owner = make_user()
        stranger = make_user()
        product = make_product()
        svc = CartService(db)
        item_id = svc.add_or_merge_item(owner.id, product.id, 1)["cart_item"]["id"]

        with pytest.raises(NotFound):
            svc.remove_item(item_id, user_id=stranger.id)

        assert len(svc.get_cart_summary(owner.id)["items"]) == 1


class TestCartSummary:

    def test_no_cart(self, db, make_user):
        user = make_user()
        with pytest.raises(NotFound, match="Cart not found"):
            CartService(db).get_cart_summary(user.id)

    def test_totals_use_frozen_prices(self, db, make_user, make_product):
        user = make_user()
        a = make_product(title="A", price="10.00")
        b = make_product(title="B", price="5.00")
        svc = CartService(db)
        svc.add_or_merge_item(user.id, a.id, 2)
        svc.add_or_merge_item(user.id, b.id, 1)

        a.price = Decimal("99.00")
        db.commit()

        summary = svc.get_cart_summary(user.id)
        assert summary["item_count"] == 2
        assert summary["total_items"] == 3
        assert summary["total_price"] == Decimal("25.00")
        assert [i["title"] for i in summary["items"]] == ["A", "B"]


class TestFrozenPricePrecision:

    def test_stored_price_keeps_all_digits(self, db, make_user, make_product):
        user = make_user()
        product = make_product(price="9.99", discount_type="percent", discount_value="33.33")

        result = CartService(db).add_or_merge_item(user.id, product.id, 1)
        db.expire_all()

        item = db.execute(select(CartItemModel)).scalar_one()
        assert result["cart_item"]["price"] == Decimal("6.660333")
        assert item.price == Decimal("6.660333")
        assert CartService(db).get_cart_summary(user.id)["total_price"] == Decimal("6.66")


class TestUnexpectedErrors:

    def test_discount_type_outside_closed_set_is_rejected(self, db, make_product):
        with pytest.raises(IntegrityError):
            make_product(discount_type="percentage")
        db.rollback()

        assert db.execute(select(func.count()).select_from(ProductModel)).scalar_one() == 0

    def test_unexpected_error_rolls_back_and_becomes_transaction_failure(
        self, db, make_user, make_product, monkeypatch
    ):
        user = make_user()
        product = make_product(stock=5)

        def broken_price(*args, **kwargs):
            raise ValueError("Unknown discount type: 'percentage'")

        monkeypatch.setattr("storefront.services.cart_service.effective_price", broken_price)

        with pytest.raises(TransactionFailure):
            CartService(db).add_or_merge_item(user.id, product.id, 1)

        assert not db.in_transaction()
        assert db.execute(select(func.count()).select_from(CartModel)).scalar_one() == 0


class TestStaleProductRead:

    def test_add_reloads_stock_changed_by_another_checkout(
        self, session_factory, make_user, make_product
    ):
        product = make_product(stock=3)
        first, second = make_user(), make_user()

        s1, s2 = session_factory(), session_factory()
        try:
            stale = s2.get(ProductModel, product.id)
            assert stale.stock_quantity == 3

            CartService(s1).add_or_merge_item(first.id, product.id, 2)
            CheckoutService(s1).checkout(first.id)

            # s2 nadal trzyma w sesji obiekt ze stanem 3
            with pytest.raises(InsufficientStock) as exc:
                CartService(s2).add_or_merge_item(second.id, product.id, 2)

            assert exc.value.available == 1
            assert s2.execute(select(func.count()).select_from(CartItemModel)).scalar_one() == 0
        finally:
            s1.close()
            s2.close()

    def test_reserved_units_never_exceed_stock(self, db, make_user, make_product):
        product = make_product(stock=3)
        first, second = make_user(), make_user()
        carts = CartService(db)

        carts.add_or_merge_item(first.id, product.id, 2)
        CheckoutService(db).checkout(first.id)

        with pytest.raises(InsufficientStock):
            carts.add_or_merge_item(second.id, product.id, 2)
        carts.add_or_merge_item(second.id, product.id, 1)

        db.refresh(product)
        in_carts = db.execute(select(func.sum(CartItemModel.quantity))).scalar_one()
        sold = 3 - product.stock_quantity
        assert sold == 2
        assert sold + in_carts <= 3
