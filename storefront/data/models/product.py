# storefront/data/models/product.py
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    title = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    discount_type = Column(String, nullable=False, default="none")  # none, percent, amount
    discount_value = Column(Numeric(10, 2), nullable=False, default=0)

    stock_quantity = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="ACTIVE")  # ACTIVE, OUT_OF_STOCK
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint(
            "discount_type IN ('none', 'percent', 'amount')",
            name="ck_products_discount_type",
        ),
    )
