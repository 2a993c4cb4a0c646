# storefront/services/seller_stats.py
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable

from sqlalchemy.orm import Session

from storefront.data.models.order_line import OrderLineModel
from storefront.domain.errors import NotFound, TransactionFailure
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.seller_repo import SellerRepo
from storefront.services.pricing import line_total, quantize_money
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SellerTally:
    total_sales: Decimal
    total_orders: int


class SellerStatsAggregator:
    """
    Statystyki sprzedawcow, wolane wylacznie z checkoutu.

    total_orders rosnie o 1 na kazda linie zamowienia danego sprzedawcy,
    nie o 1 na checkout.
    """

    def __init__(self, db: Session):
        self.repo = SellerRepo(db)

    @staticmethod
    def tally(lines: Iterable[OrderLineModel]) -> Dict[int, SellerTally]:
        stats: Dict[int, SellerTally] = defaultdict(lambda: SellerTally(Decimal("0"), 0))

        for line in lines:
            seller_id = line.product.seller_id
            if seller_id is None:
                continue
            entry = stats[seller_id]
            entry.total_sales += line_total(line.price, line.quantity)
            entry.total_orders += 1

        return dict(stats)

    def apply(self, lines: Iterable[OrderLineModel]) -> Dict[int, SellerTally]:
        stats = self.tally(lines)

        for seller_id, entry in sorted(stats.items()):
            updated = self.repo.increment_stats(seller_id, entry.total_sales, entry.total_orders)
            if updated == 0:
                raise TransactionFailure(f"Seller profile for user {seller_id} not found")
            logger.debug(
                f"Seller {seller_id}: +{entry.total_sales} sales, +{entry.total_orders} orders"
            )

        return stats


class SellerService:
    def __init__(self, db: Session):
        self.repo = SellerRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)

    def dashboard(self, user_id: int) -> Dict[str, Any]:
        profile = self.repo.get_profile(user_id)

        if not profile:
            raise NotFound("Seller profile not found")

        return {
            "seller_id": profile.user_id,
            "business_name": profile.business_name,
            "status": profile.status,
            "total_products": self.products.count_by_seller(user_id),
            "total_sales": quantize_money(profile.total_sales),
            "total_orders": profile.total_orders,
            "rating": profile.rating,
            "rating_count": profile.rating_count,
            "recent_orders": [
                {
                    "order_id": order.id,
                    "order_line_id": line.id,
                    "product_id": product.id,
                    "title": product.title,
                    "quantity": line.quantity,
                    "price": line.price,
                    "created_at": order.created_at,
                    "buyer_name": buyer.name,
                }
                for line, order, product, buyer in self.orders.recent_lines_for_seller(user_id)
            ],
            "products": [
                {
                    "id": p.id,
                    "title": p.title,
                    "price": p.price,
                    "stock_quantity": p.stock_quantity,
                    "status": p.status,
                }
                for p in self.products.latest_by_seller(user_id)
            ],
        }
