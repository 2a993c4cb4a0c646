# storefront/services/checkout_service.py
import enum
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_line import OrderLineModel
from storefront.domain.errors import EmptyCart, NoActiveCart, StorefrontError, TransactionFailure
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.inventory import InventoryLedger
from storefront.services.pricing import effective_price, line_total, quantize_money
from storefront.services.seller_stats import SellerStatsAggregator
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutState(str, enum.Enum):
    START = "START"
    VALIDATED = "VALIDATED"
    ORDER_CREATED = "ORDER_CREATED"
    INVENTORY_APPLIED = "INVENTORY_APPLIED"
    STATS_APPLIED = "STATS_APPLIED"
    CART_CLEARED = "CART_CLEARED"
    COMMITTED = "COMMITTED"


class CheckoutService:
    """
    Zamiana aktywnego koszyka na zamowienie.

    Wszystkie kroki (walidacja, zamowienie, magazyn, statystyki sprzedawcow,
    czyszczenie koszyka) to jedna transakcja - albo wszystko albo nic.
    """

    def __init__(self, db: Session):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.ledger = InventoryLedger(db)
        self.seller_stats = SellerStatsAggregator(db)

    def checkout(self, user_id: int) -> Dict[str, Any]:
        try:
            result = self._run(user_id)
            self.db.commit()
        except TransactionFailure as e:
            self.db.rollback()
            logger.error(f"Checkout failed for user {user_id}: {e.message}")
            raise
        except StorefrontError as e:
            self.db.rollback()
            logger.info(f"Checkout rejected for user {user_id}: {e.message}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Checkout failed for user {user_id}")
            raise TransactionFailure(
                "Something went wrong during checkout. Please try again."
            ) from e
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Unexpected checkout error for user {user_id}")
            raise TransactionFailure(
                "Something went wrong during checkout. Please try again."
            ) from e

        logger.info(
            f"Order {result['order_id']} created for user {user_id}: "
            f"{result['item_count']} lines, total {result['total_amount']}"
        )
        return result

    def _run(self, user_id: int) -> Dict[str, Any]:
        self._enter(CheckoutState.START, user_id)
        cart = self.carts.get_active_cart_by_user(user_id)

        if not cart:
            raise NoActiveCart("No active cart found for this user.")

        items = list(cart.items)
        if not items:
            raise EmptyCart("Cart is empty.")

        self._validate(items)
        self._enter(CheckoutState.VALIDATED, user_id)

        order = self.orders.create_order(OrderModel(user_id=user_id))
        self._enter(CheckoutState.ORDER_CREATED, user_id)

        lines: List[OrderLineModel] = []
        for item in items:
            line = self.orders.add_order_line(
                OrderLineModel(
                    order_id=order.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,  # cena z koszyka, nie przeliczona
                )
            )
            lines.append(line)
            self.ledger.reserve(item.product_id, item.quantity)
        self._enter(CheckoutState.INVENTORY_APPLIED, user_id)

        self.seller_stats.apply(lines)
        self._enter(CheckoutState.STATS_APPLIED, user_id)

        self._clear_cart(cart)
        self._enter(CheckoutState.CART_CLEARED, user_id)

        cart.status = "ORDERED"
        self.db.flush()
        self._enter(CheckoutState.COMMITTED, user_id)

        total_amount = sum((line_total(line.price, line.quantity) for line in lines), Decimal("0.00"))

        return {
            "order_id": order.id,
            "total_amount": quantize_money(total_amount),
            "item_count": len(lines),
            "total_items": sum(line.quantity for line in lines),
            "order_lines": [
                {
                    "id": line.id,
                    "order_id": line.order_id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "price": line.price,
                }
                for line in lines
            ],
        }

    def _validate(self, items: List[CartItemModel]) -> None:
        # blokujemy wszystkie produkty naraz i sprawdzamy kazda linie zanim cokolwiek zmienimy
        locked = self.products.lock_products([i.product_id for i in items])

        for item in items:
            product = locked[item.product_id]
            self.ledger.check(product, item.quantity)

            try:
                current = effective_price(product.price, product.discount_type, product.discount_value)
            except ValueError as e:
                # zamrozona cena z koszyka i tak jest naliczana
                logger.warning(f"Cannot recompute price of product {product.id}: {e}")
                continue

            if current != item.price:
                logger.info(
                    f"Price of product {product.id} changed since it was added to the cart "
                    f"({item.price} -> {current}), charging cart price"
                )

    def _clear_cart(self, cart: CartModel) -> None:
        removed = self.carts.clear_cart(cart.id)
        # relacja items w sesji nadal trzyma usuniete obiekty
        self.db.expire(cart, ["items"])
        logger.debug(f"Cleared {removed} items from cart {cart.id}")

    @staticmethod
    def _enter(state: CheckoutState, user_id: int) -> None:
        logger.debug(f"Checkout user {user_id}: {state.value}")
