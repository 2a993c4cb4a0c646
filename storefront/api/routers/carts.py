# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from storefront.api.routers.errors import to_http
from storefront.core.security import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import AddItemOut, CartOut, ItemIn, RemoveItemOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_cart_summary(user_id)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/items", response_model=AddItemOut, status_code=status.HTTP_201_CREATED)
def add_item(
    payload: ItemIn,
    response: Response,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        result = svc.add_or_merge_item(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except StorefrontError as e:
        raise to_http(e)

    # 201 nowa pozycja, 200 zwiekszona ilosc
    if not result["created"]:
        response.status_code = status.HTTP_200_OK
    return result


@router.delete("/items/{item_id}", response_model=RemoveItemOut)
def remove_item(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.remove_item(item_id, user_id=user_id)
    except StorefrontError as e:
        raise to_http(e)
