# storefront/repos/product_repo.py
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product_for_update(self, product_id: int) -> ProductModel | None:
        # SELECT ... FOR UPDATE - blokada wiersza do konca transakcji (postgres)
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def lock_products(self, product_ids: list[int]) -> dict[int, ProductModel]:
        # stala kolejnosc blokad (po id) zeby dwa checkouty sie nie zakleszczyly
        rows = self.db.execute(
            select(ProductModel)
            .where(ProductModel.id.in_(product_ids))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        return {p.id: p for p in rows}

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        # warunkowy UPDATE: 0 wierszy = ktos zdazyl zejsc ze stanu albo wylaczyl produkt
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.status == "ACTIVE",
                ProductModel.stock_quantity >= quantity,
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def mark_out_of_stock(self, product_id: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock_quantity == 0)
            .values(status="OUT_OF_STOCK")
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def count_by_seller(self, seller_id: int) -> int:
        return self.db.execute(
            select(func.count()).select_from(ProductModel).where(ProductModel.seller_id == seller_id)
        ).scalar_one()

    def latest_by_seller(self, seller_id: int, limit: int = 10) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.seller_id == seller_id)
                .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )
