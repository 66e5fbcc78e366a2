"""Domain errors raised by the warehouse service layer.

Routers translate these into HTTP responses.
"""


class WarehouseError(Exception):
    """Base class for business-rule violations."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NoOrdersSelectedError(WarehouseError):
    def __init__(self, message: str = "No orders selected"):
        super().__init__(message)


class OrderNotFoundError(WarehouseError):
    status_code = 404


class ProductNotFoundError(WarehouseError):
    status_code = 404


class LocationNotFoundError(WarehouseError):
    status_code = 404


class LocationConflictError(WarehouseError):
    status_code = 409


class InvalidStockError(WarehouseError):
    pass


class ProductConflictError(WarehouseError):
    status_code = 409
