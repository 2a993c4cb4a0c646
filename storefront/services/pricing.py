# storefront/services/pricing.py
"""
Silnik cen - czyste funkcje, bez stanu i bez bazy.

Ta sama formula liczona jest dwa razy: przy dodaniu do koszyka (cena zamrozona
w CartItem) i przy checkoucie (tylko do porownania, zamowienie bierze cene z koszyka).
"""
import enum
from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

# zewnetrzne nazwy spotykane w formularzach produktu
_ALIASES = {
    "percentage": "percent",
    "fixed": "amount",
    "": "none",
}


class DiscountType(str, enum.Enum):
    NONE = "none"
    PERCENT = "percent"
    AMOUNT = "amount"

    @classmethod
    def parse(cls, value) -> "DiscountType":
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown discount type: {value!r}") from None


def normalize_discount_type(value: str | None) -> DiscountType:
    """Mapuje alternatywne nazwy ("percentage", "fixed") na zamkniety zbior typow."""
    if value is None:
        return DiscountType.NONE
    key = value.strip().lower()
    return DiscountType.parse(_ALIASES.get(key, key))


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() zeby float 0.1 nie zamienil sie w 0.1000000000000000055...
    return Decimal(str(value))


def effective_price(list_price, discount_type, discount_value) -> Decimal:
    price = to_decimal(list_price)
    kind = DiscountType.parse(discount_type)
    value = to_decimal(discount_value) if discount_value is not None else ZERO

    if kind is DiscountType.NONE or value <= 0:
        return price

    if kind is DiscountType.PERCENT:
        price = price * (1 - value / HUNDRED)
    else:
        price = price - value

    return max(ZERO, price)


def line_total(price, quantity: int) -> Decimal:
    return to_decimal(price) * quantity


def quantize_money(amount) -> Decimal:
    # zaokraglenie tylko na granicy prezentacji
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
