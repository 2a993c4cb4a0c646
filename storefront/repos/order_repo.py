# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line import OrderLineModel
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_line(self, line: OrderLineModel) -> OrderLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def recent_lines_for_seller(self, seller_id: int, limit: int = 10):
        # (linia, zamowienie, produkt, kupujacy), najnowsze zamowienia pierwsze
        return self.db.execute(
            select(OrderLineModel, OrderModel, ProductModel, UserModel)
            .join(OrderModel, OrderLineModel.order_id == OrderModel.id)
            .join(ProductModel, OrderLineModel.product_id == ProductModel.id)
            .join(UserModel, OrderModel.user_id == UserModel.id)
            .where(ProductModel.seller_id == seller_id)
            .order_by(OrderModel.created_at.desc(), OrderLineModel.id.desc())
            .limit(limit)
        ).all()
