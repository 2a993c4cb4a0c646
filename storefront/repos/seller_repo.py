# storefront/repos/seller_repo.py
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.seller_profile import SellerProfileModel


class SellerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, user_id: int) -> SellerProfileModel | None:
        return self.db.execute(
            select(SellerProfileModel).where(SellerProfileModel.user_id == user_id)
        ).scalar_one_or_none()

    def increment_stats(self, user_id: int, sales: Decimal, orders: int) -> int:
        # UPDATE ... SET total_sales = total_sales + :sales, nigdy read-modify-write
        result = self.db.execute(
            update(SellerProfileModel)
            .where(SellerProfileModel.user_id == user_id)
            .values(
                total_sales=SellerProfileModel.total_sales + sales,
                total_orders=SellerProfileModel.total_orders + orders,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
