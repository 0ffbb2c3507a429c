"""Errors raised by the checkout flow and order lookups.

Each carries the HTTP status and the message shown to the shopper; the
application turns them into ``{"error": message}`` responses.
"""


class StorefrontError(Exception):
    status_code = 400
    message = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidEmail(StorefrontError):
    message = "Valid email is required"


class EmptyCart(StorefrontError):
    message = "Cart is empty"


class ProductsNotFound(StorefrontError):
    message = "Some products could not be found"


class ProductNotFound(StorefrontError):
    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ProductInactive(StorefrontError):
    def __init__(self, name: str) -> None:
        self.product_name = name
        super().__init__(f"Product {name} is no longer available")


class PriceMismatch(StorefrontError):
    message = "Product prices have changed. Please refresh your cart."


class OrderNotFound(StorefrontError):
    status_code = 404
    message = "Order not found"
