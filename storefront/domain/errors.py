# storefront/domain/errors.py
"""Bledy domeny koszyka i checkoutu.

Bledy biznesowe (walidacja) trafiaja do klienta z komunikatem,
TransactionFailure to jedyny blad operacyjny (logowany ze stack trace).
"""


class StorefrontError(Exception):
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StorefrontError):
    http_status = 404


class Unavailable(StorefrontError):
    def __init__(self, product_name: str, status: str):
        super().__init__(
            f'Product "{product_name}" is not available for purchase (Status: {status}).'
        )
        self.product_name = product_name
        self.status = status


class InsufficientStock(StorefrontError):
    def __init__(self, product_name: str, requested: int, available: int, in_cart: int = 0):
        if in_cart:
            message = (
                f'Insufficient stock for "{product_name}". Current in cart: {in_cart}, '
                f"requested: {requested}, available: {available}."
            )
        else:
            message = (
                f'Insufficient stock for "{product_name}". Only {available} available, '
                f"but {requested} requested."
            )
        super().__init__(message)
        self.product_name = product_name
        self.requested = requested
        self.available = available
        self.in_cart = in_cart


class InvalidQuantity(StorefrontError):
    pass


class NoActiveCart(StorefrontError):
    http_status = 404


class EmptyCart(StorefrontError):
    pass


class TransactionFailure(StorefrontError):
    http_status = 500
