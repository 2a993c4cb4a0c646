# storefront/core/security.py
# JWT: wydawanie i weryfikacja access tokenow. Rdzen (serwisy) dostaje juz tylko user_id.
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from storefront.domain.schemas import TokenPayload
from storefront.utils.settings import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    AUTH_TOKEN_URL,
    JWT_ALGORITHM,
    JWT_SECRET,
)

# endpoint logowania nie jest czescia tej aplikacji, tokenUrl trafia tylko do OpenAPI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=AUTH_TOKEN_URL)


def create_access_token(
    subject: int | str,
    role: str = "CUSTOMER",
    expires_delta: timedelta | None = None,
) -> str:
    """Tworzy JWT z polem sub = id uzytkownika."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": str(subject), "role": role, "exp": expire}
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenPayload:
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    return TokenPayload(**payload)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_payload(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    try:
        payload = decode_access_token(token)
    except (JWTError, ValidationError):
        raise _credentials_exception()
    if not payload.sub.isdigit():
        raise _credentials_exception()
    return payload


def get_current_user_id(payload: TokenPayload = Depends(get_token_payload)) -> int:
    return int(payload.sub)


def require_seller(payload: TokenPayload = Depends(get_token_payload)) -> int:
    if payload.role != "SELLER":
        raise HTTPException(status_code=403, detail="Seller access required")
    return int(payload.sub)
