# storefront/data/models/seller_profile.py
from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from storefront.data.database import Base


class SellerProfileModel(Base):
    __tablename__ = "seller_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    business_name = Column(String, nullable=False)
    status = Column(String, nullable=False, default="PENDING")
    commission_rate = Column(Numeric(5, 4), nullable=False, default=0.05)

    # agregaty, zmieniane tylko inkrementami z checkoutu
    total_sales = Column(Numeric(18, 6), nullable=False, default=0)
    total_orders = Column(Integer, nullable=False, default=0)
    rating = Column(Numeric(3, 2), nullable=True)
    rating_count = Column(Integer, nullable=False, default=0)
