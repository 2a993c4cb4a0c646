# storefront/api/routers/errors.py
from fastapi import HTTPException

from storefront.domain.errors import StorefrontError


def to_http(e: StorefrontError) -> HTTPException:
    return HTTPException(status_code=e.http_status, detail=e.message)
