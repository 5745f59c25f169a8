"""Base service exceptions.

These exceptions are raised by the service and store layers and are
converted to HTTP responses by the handlers registered in ``hermes.main``.
"""


class ServiceError(Exception):
    """Base service exception."""

    pass


class NotFoundError(ServiceError):
    """Resource not found."""

    pass


class ValidationError(ServiceError):
    """Missing required field or malformed value in a single record."""

    pass


class FormatError(ServiceError):
    """Input file cannot be used at all (bad JSON, too few CSV lines, ...).

    Raised before the store is touched.
    """

    pass


class StoreError(ServiceError):
    """Read or write against the record store failed."""

    pass


class OrderNotFound(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class DuplicateOrderError(StoreError):
    """Another order already uses this order number."""

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order number already exists: {order_number}")
