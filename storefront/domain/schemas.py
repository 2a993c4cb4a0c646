# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    # bez koercji: typ i zakres sprawdza CartService (InvalidQuantity -> 400),
    # "3", 2.5 i true nie sa iloscia
    quantity: Any = Field(1, description="Ilość produktu, 1-100")


class CartItemOut(BaseModel):
    id: int
    product_id: int
    title: str | None = None
    quantity: int
    price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: int
    user_id: int
    status: str
    items: List[CartItemOut]
    item_count: int
    total_items: int
    total_price: Decimal


class AddItemOut(BaseModel):
    message: str
    cart_item: CartItemOut
    cart_summary: CartOut


class RemoveItemOut(BaseModel):
    id: int
    deleted: bool


class OrderLineOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal


class CheckoutOut(BaseModel):
    """Schema dla wyniku checkoutu (response)."""

    order_id: int
    total_amount: Decimal
    item_count: int
    total_items: int
    order_lines: List[OrderLineOut]


class SellerOrderLineOut(BaseModel):
    order_id: int
    order_line_id: int
    product_id: int
    title: str
    quantity: int
    price: Decimal
    created_at: datetime
    buyer_name: str


class SellerProductOut(BaseModel):
    id: int
    title: str
    price: Decimal
    stock_quantity: int
    status: str


class SellerDashboardOut(BaseModel):
    seller_id: int
    business_name: str
    status: str
    total_products: int
    total_sales: Decimal
    total_orders: int
    rating: Decimal | None = None
    rating_count: int
    recent_orders: List[SellerOrderLineOut] = []
    products: List[SellerProductOut] = []


class TokenPayload(BaseModel):
    sub: str
    role: str = "CUSTOMER"
    exp: datetime | None = None
