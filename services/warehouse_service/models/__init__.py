"""Warehouse Service models package."""

from services.warehouse_service.models.catalog import (
    DEFAULT_MIN_STOCK,
    Product,
    StorageLocation,
)
from services.warehouse_service.models.enums import (
    FulfillmentStatus,
    StockMovementType,
)
from services.warehouse_service.models.inventory import (
    InventoryAdjustment,
    StockMovement,
)
from services.warehouse_service.models.orders import Order, OrderItem

__all__ = [
    "DEFAULT_MIN_STOCK",
    "FulfillmentStatus",
    "InventoryAdjustment",
    "Order",
    "OrderItem",
    "Product",
    "StockMovement",
    "StockMovementType",
    "StorageLocation",
]
