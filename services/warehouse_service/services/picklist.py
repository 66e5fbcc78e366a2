"""Pick-list consolidation and completion.

A pick list merges the line items of several orders into one checklist per
SKU, ordered along the warehouse walking route (storage location code).
Items without a storage location are collected at the end.
"""

import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from libs.common.logging import get_logger
from services.warehouse_service.models import FulfillmentStatus, Order
from services.warehouse_service.services.exceptions import (
    NoOrdersSelectedError,
    OrderNotFoundError,
)
from services.warehouse_service.services.store import WarehouseStore

logger = get_logger(__name__)


@dataclass
class PickListOrderRef:
    """One order's share of a pick list line."""

    order_id: Optional[uuid.UUID]
    order_number: str
    quantity: int
    customer_name: str


@dataclass
class PickListItem:
    sku: str
    title: str
    storage_location: Optional[str] = None  # None = no location assigned
    barcode: Optional[str] = None
    total_quantity: int = 0
    orders: list[PickListOrderRef] = field(default_factory=list)
    picked: bool = False


@dataclass
class PickListProgress:
    picked: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.picked

    @property
    def all_picked(self) -> bool:
        return self.total > 0 and self.picked == self.total


def merge_key(item) -> str:
    """SKU, or the title for line items that carry no SKU.

    Two blank-SKU products with the same title end up on one line.
    """
    return item.sku or item.title


def route_sort_key(item: PickListItem) -> tuple[bool, str, str]:
    """Items with a location first (by code, then SKU); unlocated items last."""
    has_no_location = item.storage_location is None
    return (has_no_location, item.storage_location or "", item.sku)


def build_pick_list(selected_orders: Sequence[Order]) -> list[PickListItem]:
    """
    Merge the items of `selected_orders` into a route-ordered pick list.

    Orders must have their items (and each item's product, when resolved)
    loaded already; nothing is fetched here.

    Raises:
        NoOrdersSelectedError: `selected_orders` is empty.
    """
    if not selected_orders:
        raise NoOrdersSelectedError()

    lines: dict[str, PickListItem] = {}

    for order in selected_orders:
        for item in order.items:
            key = merge_key(item)
            line = lines.get(key)
            if line is None:
                product = item.product
                line = PickListItem(
                    sku=item.sku,
                    title=item.title,
                    storage_location=(product.storage_location or None)
                    if product is not None
                    else None,
                    barcode=product.barcode if product is not None else None,
                )
                lines[key] = line

            line.total_quantity += item.quantity
            line.orders.append(
                PickListOrderRef(
                    order_id=order.id,
                    order_number=order.order_number,
                    quantity=item.quantity,
                    customer_name=order.customer_name,
                )
            )

    return sorted(lines.values(), key=route_sort_key)


def toggle_picked(items: list[PickListItem], index: int) -> PickListItem:
    """Flip the picked flag of one line (in memory only)."""
    item = items[index]
    item.picked = not item.picked
    return item


def mark_picked_by_barcode(
    items: Iterable[PickListItem], code: str
) -> Optional[PickListItem]:
    """Mark the first unpicked line whose barcode or SKU equals `code`."""
    code = code.strip()
    if not code:
        return None
    for item in items:
        if not item.picked and code in (item.barcode, item.sku):
            item.picked = True
            return item
    return None


def pick_list_progress(items: Sequence[PickListItem]) -> PickListProgress:
    return PickListProgress(
        picked=sum(1 for item in items if item.picked), total=len(items)
    )


def order_ids_in(items: Iterable[PickListItem]) -> list[uuid.UUID]:
    """Distinct order ids referenced by a pick list, in first-seen order."""
    seen: dict[uuid.UUID, None] = {}
    for item in items:
        for ref in item.orders:
            if ref.order_id is not None:
                seen.setdefault(ref.order_id, None)
    return list(seen)


async def load_pick_list(
    store: WarehouseStore, order_ids: Sequence[uuid.UUID]
) -> list[PickListItem]:
    """Load the selected orders with their items and build the pick list."""
    if not order_ids:
        raise NoOrdersSelectedError()

    orders = await store.get_orders_with_items(order_ids)
    found = {order.id for order in orders}
    missing = [str(order_id) for order_id in order_ids if order_id not in found]
    if missing:
        raise OrderNotFoundError(f"Orders not found: {', '.join(missing)}")

    return build_pick_list(orders)


async def complete_pick_list(
    store: WarehouseStore, order_ids: Sequence[uuid.UUID]
) -> int:
    """
    Mark every selected order as fulfilled.

    Applies regardless of which lines were ticked; confirming unpicked items is
    the caller's job. Orders are committed one at a time, so a failure leaves
    the earlier ones fulfilled. Stock levels are not touched.
    """
    if not order_ids:
        raise NoOrdersSelectedError()

    updated = 0
    for order_id in order_ids:
        order = await store.set_fulfillment_status(
            order_id, FulfillmentStatus.FULFILLED
        )
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        await store.commit()
        updated += 1
        logger.info("Order %s marked fulfilled", order.order_number)

    return updated
