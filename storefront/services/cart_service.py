# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import InvalidQuantity, NotFound, StorefrontError, TransactionFailure
from storefront.repos.cart_repo import CartRepo
from storefront.services.inventory import InventoryLedger
from storefront.services.pricing import effective_price, line_total, quantize_money
from storefront.utils.settings import MAX_ITEM_QUANTITY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def serialize_item(item: CartItemModel) -> Dict[str, Any]:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "title": item.product.title if item.product is not None else None,
        "quantity": item.quantity,
        "price": item.price,
        "line_total": quantize_money(line_total(item.price, item.quantity)),
    }


class CartService:
    """
    Use case'y koszyka.
    commands (add_or_merge_item, remove_item) - jedna transakcja na wywolanie
    query (get_cart_summary) tylko odczyt
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.ledger = InventoryLedger(db)

    #query
    def get_cart_summary(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            raise NotFound("Cart not found")

        return self._summary(cart)

    #commands
    def add_or_merge_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        """
        Use Case: dodanie produktu do koszyka (albo zwiekszenie ilosci).

        Cena jest liczona z aktualnej ceny i rabatu produktu i zamrazana na pozycji.
        Przy merge cena jest nadpisywana nowa, nie usredniana.
        Cala operacja to jedna transakcja, wiersz produktu jest blokowany.
        """
        self._validate_quantity(quantity)

        try:
            cart = self._get_or_create_cart(user_id)

            product = self.ledger.load(product_id)
            price = effective_price(product.price, product.discount_type, product.discount_value)

            existing_item = self.repo.get_cart_item(cart.id, product_id)

            if existing_item:
                self.ledger.check(product, quantity, in_cart=existing_item.quantity)

                new_quantity = existing_item.quantity + quantity
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{existing_item.quantity} -> {new_quantity}"
                )
                existing_item.quantity = new_quantity
                existing_item.price = price  # cena odswiezana przy kazdym merge
                item = self.repo.add_cart_item(existing_item)
                created = False
                message = f"Cart updated! Quantity increased to {new_quantity}."
            else:
                self.ledger.check(product, quantity)

                logger.info(f"Adding product {product_id} to cart {cart.id}")
                item = self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=quantity,
                        price=price,
                    )
                )
                created = True
                message = "Product added to cart successfully."

            result = {
                "cart_item": serialize_item(item),
                "cart_summary": self._summary(cart),
                "created": created,
                "message": message,
            }

            self.repo.commit()

        except StorefrontError as e:
            self.repo.rollback()
            logger.info(f"Add to cart rejected for user {user_id}: {e.message}")
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Add to cart failed for user {user_id}, product {product_id}")
            raise TransactionFailure("Failed to add product to cart. Please try again.") from e
        except Exception as e:
            # np. niepoprawny typ rabatu w wierszu produktu
            self.repo.rollback()
            logger.exception(f"Unexpected error adding product {product_id} for user {user_id}")
            raise TransactionFailure("Failed to add product to cart. Please try again.") from e

        return result

    def remove_item(self, cart_item_id: int, user_id: int | None = None) -> Dict[str, Any]:
        """
        Usuwa pozycje koszyka. Bez user_id nie ma sprawdzenia wlasciciela,
        warstwa HTTP przekazuje user_id z tokena.
        """
        item = self.repo.get_cart_item_by_id(cart_item_id)

        if not item:
            raise NotFound("Cart item not found")

        if user_id is not None and item.cart.user_id != user_id:
            # nie zdradzamy ze pozycja istnieje w cudzym koszyku
            raise NotFound("Cart item not found")

        try:
            self.repo.delete_cart_item(item)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Removing cart item {cart_item_id} failed")
            raise TransactionFailure("Couldn't delete item") from e

        logger.info(f"Cart item {cart_item_id} deleted")

        return {"id": cart_item_id, "deleted": True}

    def _validate_quantity(self, quantity) -> None:
        # bool to podklasa int, ale True nie jest iloscia
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantity(f"Quantity must be a number between 1 and {MAX_ITEM_QUANTITY}.")

        if quantity < 1 or quantity > MAX_ITEM_QUANTITY:
            raise InvalidQuantity(f"Quantity must be a number between 1 and {MAX_ITEM_QUANTITY}.")

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id, lock=True)

        if cart and cart.status != "ACTIVE":
            # koszyk po checkoucie (ORDERED) wraca do ACTIVE zamiast tworzyc drugi wiersz
            logger.info(f"Reactivating cart {cart.id} ({cart.status}) for user {user_id}")
            cart.status = "ACTIVE"

        if not cart:
            cart = self.repo.create_cart(CartModel(user_id=user_id, status="ACTIVE"))
            logger.info(f"Created cart {cart.id} for user {user_id}")

        return cart

    def _summary(self, cart: CartModel) -> Dict[str, Any]:
        self.repo.db.flush()
        items = self.repo.get_cart_items(cart.id)

        total_items = sum(i.quantity for i in items)
        total_price = sum((line_total(i.price, i.quantity) for i in items), Decimal("0.00"))

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "status": cart.status,
            "items": [serialize_item(i) for i in items],
            "item_count": len(items),
            "total_items": total_items,
            "total_price": quantize_money(total_price),
        }
