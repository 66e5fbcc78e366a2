"""Stock operations: products, barcodes, adjustments, counts and movement history."""

import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.warehouse_service.models import (
    InventoryAdjustment,
    Product,
    StockMovement,
    StockMovementType,
)
from services.warehouse_service.services.exceptions import (
    InvalidStockError,
    ProductConflictError,
    ProductNotFoundError,
)
from services.warehouse_service.services.store import WarehouseStore

logger = get_logger(__name__)

COUNT_REASON = "inventory count"


@dataclass
class CountEntry:
    product_id: uuid.UUID
    counted: int


async def _require_product(store: WarehouseStore, product_id: uuid.UUID) -> Product:
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


async def lookup_product(store: WarehouseStore, code: str) -> Product:
    """Find a product by scanned barcode or typed SKU."""
    code = code.strip()
    product = await store.find_product_by_code(code) if code else None
    if product is None:
        raise ProductNotFoundError(f"No product with barcode or SKU '{code}'")
    return product


async def adjust_stock(
    store: WarehouseStore,
    product_id: uuid.UUID,
    delta: int,
    *,
    performed_by: str,
    notes: Optional[str] = None,
) -> Product:
    """Add `delta` to the stock (never below zero) and log the movement."""
    if delta == 0:
        raise InvalidStockError("Adjustment must not be zero")

    product = await _require_product(store, product_id)
    old_stock = product.current_stock
    new_stock = max(0, old_stock + delta)

    await store.update_product(
        product, {"current_stock": new_stock, "last_inventory_update": utc_now()}
    )
    await store.add_stock_movement(
        {
            "product_id": product.id,
            "movement_type": StockMovementType.ADJUSTMENT,
            "quantity": new_stock - old_stock,
            "from_location": product.storage_location,
            "notes": notes,
            "performed_by": performed_by,
        }
    )
    await store.commit()

    logger.info("Stock of %s adjusted %d -> %d", product.sku, old_stock, new_stock)
    return product


async def apply_inventory_count(
    store: WarehouseStore,
    counts: Iterable[CountEntry],
    *,
    adjusted_by: str,
) -> list[InventoryAdjustment]:
    """
    Write counted quantities back to stock.

    Only products whose count differs from the recorded stock are touched;
    each of those gets an InventoryAdjustment row. The whole count is one
    commit.
    """
    counts = list(counts)
    for entry in counts:
        if entry.counted < 0:
            raise InvalidStockError(
                f"Counted quantity for {entry.product_id} must not be negative"
            )

    adjustments: list[InventoryAdjustment] = []
    counted_at = utc_now()

    for entry in counts:
        product = await _require_product(store, entry.product_id)
        old_stock = product.current_stock
        if entry.counted == old_stock:
            continue

        await store.update_product(
            product,
            {"current_stock": entry.counted, "last_inventory_update": counted_at},
        )
        adjustments.append(
            await store.add_inventory_adjustment(
                {
                    "product_id": product.id,
                    "old_quantity": old_stock,
                    "new_quantity": entry.counted,
                    "difference": entry.counted - old_stock,
                    "reason": COUNT_REASON,
                    "adjusted_by": adjusted_by,
                }
            )
        )

    await store.commit()
    logger.info("Inventory count applied: %d of %d products changed", len(adjustments), len(counts))
    return adjustments


async def list_low_stock(store: WarehouseStore) -> list[Product]:
    return await store.list_low_stock_products()


async def create_product(
    store: WarehouseStore, data: dict[str, Any], *, performed_by: str
) -> Product:
    """
    Create a product by hand (items not sold through Shopify).

    SKU and barcode must not be taken by another product. Opening stock is
    booked as an adjustment movement so the history starts at zero.
    """
    sku = (data.get("sku") or "").strip()
    name = (data.get("name") or "").strip()
    if not sku or not name:
        raise InvalidStockError("SKU and name are required")
    if await store.find_product_id_by_sku(sku) is not None:
        raise ProductConflictError(f"SKU '{sku}' already exists")

    barcode = (data.get("barcode") or "").strip() or None
    if barcode and await store.find_product_by_barcode(barcode) is not None:
        raise ProductConflictError(f"Barcode '{barcode}' is already assigned")

    product = await store.create_product(
        {**data, "sku": sku, "name": name, "barcode": barcode}
    )
    if product.current_stock:
        await store.add_stock_movement(
            {
                "product_id": product.id,
                "movement_type": StockMovementType.ADJUSTMENT,
                "quantity": product.current_stock,
                "to_location": product.storage_location,
                "notes": "opening stock",
                "performed_by": performed_by,
            }
        )
    await store.commit()

    logger.info("Product %s created manually by %s", sku, performed_by)
    return product


async def assign_barcode(
    store: WarehouseStore, product_id: uuid.UUID, barcode: str
) -> Product:
    """Attach a scanned barcode to a product so later scans resolve to it."""
    barcode = barcode.strip()
    if not barcode:
        raise InvalidStockError("Barcode must not be empty")

    product = await _require_product(store, product_id)
    owner = await store.find_product_by_barcode(barcode)
    if owner is not None and owner.id != product.id:
        raise ProductConflictError(
            f"Barcode '{barcode}' is already assigned to {owner.sku}"
        )

    if product.barcode != barcode:
        await store.update_product(product, {"barcode": barcode})
        await store.commit()
        logger.info("Barcode %s assigned to %s", barcode, product.sku)
    return product


async def list_movements(
    store: WarehouseStore,
    product_id: Optional[uuid.UUID] = None,
    limit: int = 100,
) -> list[StockMovement]:
    """Newest stock movements first, optionally for one product."""
    if product_id is not None:
        await _require_product(store, product_id)
    return await store.list_stock_movements(product_id, limit)
