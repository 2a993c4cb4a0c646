# storefront/api/routers/sellers.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.routers.errors import to_http
from storefront.core.security import require_seller
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import SellerDashboardOut
from storefront.services.seller_stats import SellerService

router = APIRouter(prefix="/seller", tags=["seller"])


@router.get("/dashboard", response_model=SellerDashboardOut)
def dashboard(
    seller_id: int = Depends(require_seller),
    db: Session = Depends(get_db),
):
    svc = SellerService(db)
    try:
        return svc.dashboard(seller_id)
    except StorefrontError as e:
        raise to_http(e)
