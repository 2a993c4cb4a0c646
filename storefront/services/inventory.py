# storefront/services/inventory.py
from dataclasses import dataclass

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import InsufficientStock, NotFound, Unavailable
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ACTIVE = "ACTIVE"
OUT_OF_STOCK = "OUT_OF_STOCK"


@dataclass(frozen=True)
class ReserveResult:
    product_id: int
    new_stock: int
    status_changed: bool


class InventoryLedger:
    """
    Jedyny modul ktory zmienia stan magazynu produktu.
    Nie commituje - reserve zawsze dziala wewnatrz transakcji wolajacego.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    @staticmethod
    def check(product: ProductModel, quantity: int, in_cart: int = 0) -> None:
        """Walidacja bez zmian: status ACTIVE i wystarczajacy stan."""
        if product.status != ACTIVE:
            raise Unavailable(product.title, product.status)

        if in_cart + quantity > product.stock_quantity:
            raise InsufficientStock(
                product.title,
                requested=quantity,
                available=product.stock_quantity,
                in_cart=in_cart,
            )

    def load(self, product_id: int) -> ProductModel:
        product = self.repo.get_product_for_update(product_id)
        if product is None:
            raise NotFound(f"Product {product_id} not found.")
        return product

    def reserve(self, product_id: int, quantity: int) -> ReserveResult:
        product = self.load(product_id)
        self.check(product, quantity)
        return self._apply(product, quantity)

    def _apply(self, product: ProductModel, quantity: int) -> ReserveResult:
        # zejscie ze stanu jednym warunkowym UPDATE, nawet bez FOR UPDATE (sqlite)
        # stan nie spadnie ponizej zera
        db = self.repo.db
        db.flush()

        if self.repo.decrement_stock(product.id, quantity) == 0:
            db.refresh(product)
            self.check(product, quantity)
            raise InsufficientStock(
                product.title,
                requested=quantity,
                available=product.stock_quantity,
            )

        status_changed = self.repo.mark_out_of_stock(product.id) > 0
        db.refresh(product)

        if status_changed:
            logger.info(f"Product {product.id} ({product.title}) is now OUT_OF_STOCK")

        return ReserveResult(
            product_id=product.id,
            new_stock=product.stock_quantity,
            status_changed=status_changed,
        )
