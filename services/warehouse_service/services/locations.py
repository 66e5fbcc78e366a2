"""Storage locations and moving stock between them."""

import uuid
from typing import Any, Optional

from libs.common.logging import get_logger
from services.warehouse_service.models import (
    Product,
    StockMovementType,
    StorageLocation,
)
from services.warehouse_service.services.exceptions import (
    InvalidStockError,
    LocationConflictError,
    LocationNotFoundError,
    ProductNotFoundError,
)
from services.warehouse_service.services.store import WarehouseStore

logger = get_logger(__name__)

# Placeholder parts for codes generated from incomplete addresses
_CODE_DEFAULTS = ("Z", "A", "S", "B")


def generate_location_code(
    zone: Optional[str] = None,
    aisle: Optional[str] = None,
    shelf: Optional[str] = None,
    level: Optional[str] = None,
) -> str:
    """Build ``ZONE-AISLE-SHELF-LEVEL``, e.g. ``A-01-03-2``."""
    parts = [
        (part or "").strip().upper() or default
        for part, default in zip((zone, aisle, shelf, level), _CODE_DEFAULTS)
    ]
    return "-".join(parts)


async def create_location(
    store: WarehouseStore, data: dict[str, Any]
) -> StorageLocation:
    data = dict(data)
    code = (data.pop("code", None) or "").strip().upper()
    if not code:
        code = generate_location_code(
            data.get("zone"), data.get("aisle"), data.get("shelf"), data.get("level")
        )

    if await store.get_location(code) is not None:
        raise LocationConflictError(f"Location {code} already exists")

    location = await store.create_location({**data, "code": code, "current_usage": 0})
    await store.commit()
    logger.info("Created storage location %s", code)
    return location


async def assign_product_location(
    store: WarehouseStore, product_id: uuid.UUID, code: Optional[str]
) -> Product:
    """Point a product at a location; ``None`` clears the assignment."""
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")

    if code is not None:
        code = code.strip().upper()
        if await store.get_location(code) is None:
            raise LocationNotFoundError(f"Location {code} not found")

    await store.update_product(product, {"storage_location": code})
    await store.commit()
    return product


def _clamp_usage(location: StorageLocation, usage: int) -> int:
    return max(0, min(location.capacity, usage))


async def transfer_stock(
    store: WarehouseStore,
    product_id: uuid.UUID,
    from_code: str,
    to_code: str,
    quantity: int,
    *,
    performed_by: str,
) -> Product:
    """
    Move `quantity` units of a product to another location.

    Records a transfer movement, re-points the product to the destination and
    shifts usage between the two locations (kept within 0..capacity).
    """
    if quantity <= 0:
        raise InvalidStockError("Transfer quantity must be positive")
    from_code = from_code.strip().upper()
    to_code = to_code.strip().upper()
    if from_code == to_code:
        raise InvalidStockError("Source and destination are the same location")

    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")

    source = await store.get_location(from_code)
    if source is None:
        raise LocationNotFoundError(f"Location {from_code} not found")
    destination = await store.get_location(to_code)
    if destination is None:
        raise LocationNotFoundError(f"Location {to_code} not found")

    await store.add_stock_movement(
        {
            "product_id": product.id,
            "movement_type": StockMovementType.TRANSFER,
            "quantity": quantity,
            "from_location": source.code,
            "to_location": destination.code,
            "performed_by": performed_by,
        }
    )
    await store.update_location(
        source, {"current_usage": _clamp_usage(source, source.current_usage - quantity)}
    )
    await store.update_location(
        destination,
        {"current_usage": _clamp_usage(destination, destination.current_usage + quantity)},
    )
    await store.update_product(product, {"storage_location": destination.code})
    await store.commit()

    logger.info(
        "Moved %d x %s from %s to %s", quantity, product.sku, source.code, destination.code
    )
    return product
