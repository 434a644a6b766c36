class StorefrontError(Exception):
    """Base class for errors raised by the storefront services."""


class NotFoundError(StorefrontError):
    def __init__(self, what: str, key: str):
        super().__init__(f"{what} not found")
        self.what = what
        self.key = key


class OrderNotFound(NotFoundError):
    def __init__(self, key: str):
        super().__init__("Order", key)


class ProductNotFound(NotFoundError):
    def __init__(self, key: str):
        super().__init__("Product", key)


class MessageNotFound(NotFoundError):
    def __init__(self, key: str):
        super().__init__("Message", key)


class EmptyCartError(StorefrontError):
    def __init__(self):
        super().__init__("Cart is empty")
