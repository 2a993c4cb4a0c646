"""Shared fixtures: in-memory SQLite per test, factories for users/products/sellers."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.data.database import Base
from storefront.data.models import ProductModel, SellerProfileModel, UserModel


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="CUSTOMER", name=None):
        counter["n"] += 1
        user = UserModel(
            email=f"user{counter['n']}@example.com",
            name=name or f"User {counter['n']}",
            role=role,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_seller(db, make_user):
    def _make(business_name="Acme"):
        user = make_user(role="SELLER")
        db.add(SellerProfileModel(user_id=user.id, business_name=business_name))
        db.commit()
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(
        title="Widget",
        price="10.00",
        stock=10,
        status="ACTIVE",
        discount_type="none",
        discount_value="0",
        seller=None,
    ):
        product = ProductModel(
            title=title,
            price=Decimal(price),
            stock_quantity=stock,
            status=status,
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            seller_id=seller.id if seller is not None else None,
        )
        db.add(product)
        db.commit()
        return product

    return _make
