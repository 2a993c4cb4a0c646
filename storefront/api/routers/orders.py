# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.routers.errors import to_http
from storefront.core.security import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CheckoutOut
from storefront.services.checkout_service import CheckoutService

router = APIRouter(tags=["orders"])


def get_service(db: Session):
    return CheckoutService(db)


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Zamienia aktywny koszyk uzytkownika na zamowienie.
    """
    svc = get_service(db)
    try:
        return svc.checkout(user_id)
    except StorefrontError as e:
        raise to_http(e)
