"""Shopify catalog and order synchronization.

Pulls products (with inventory levels) and recent orders from Shopify and
reconciles them against the local store. Work is strictly sequential: pages,
inventory batches and record writes are awaited one after another.

Each product variant and each order is its own unit of work. A failing write
is rolled back, counted and skipped; progress made before it stays committed.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx
from libs.common.datetime_utils import days_ago, parse_iso_datetime
from libs.common.logging import get_logger
from services.warehouse_service.models import DEFAULT_MIN_STOCK, FulfillmentStatus
from services.warehouse_service.services.store import WarehouseStore
from services.warehouse_service.shopify_client import ShopifyClient, ShopifyError

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Sync limits
# ---------------------------------------------------------------------------
PRODUCT_PAGE_LIMIT = 250
MAX_PRODUCT_PAGES = 20
INVENTORY_BATCH_SIZE = 50
ORDER_LOOKBACK_DAYS = 90
ORDER_PAGE_LIMIT = 250

DEFAULT_CATEGORY = "Feuerwerk"
GUEST_CUSTOMER_NAME = "Guest"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ProductSyncResult:
    created: int = 0
    updated: int = 0
    errors: int = 0
    total_products: int = 0
    total_variants: int = 0
    pages_fetched: int = 0
    completed: bool = True  # False when paging stopped before the last page

    @property
    def message(self) -> str:
        message = (
            f"Product sync finished: {self.created} created, "
            f"{self.updated} updated, {self.errors} errors"
        )
        if not self.completed:
            message += f" (stopped after {self.pages_fetched} page(s))"
        return message


@dataclass
class OrderSyncResult:
    created: int = 0
    updated: int = 0
    errors: int = 0
    total_orders: int = 0
    items_created: int = 0
    items_updated: int = 0
    items_deleted: int = 0
    window_start: Optional[datetime] = None

    @property
    def message(self) -> str:
        return (
            f"Order sync finished: {self.created + self.updated} of "
            f"{self.total_orders} orders synced ({self.created} new), "
            f"{self.errors} errors"
        )


@dataclass
class FullSyncResult:
    products: ProductSyncResult
    orders: Optional[OrderSyncResult] = None
    order_error: Optional[str] = None


# ---------------------------------------------------------------------------
# Payload mapping
# ---------------------------------------------------------------------------


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value if value not in (None, "") else "0"))
    except InvalidOperation:
        return Decimal("0")


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def _is_product_payload(product: Any) -> bool:
    return isinstance(product, dict) and isinstance(product.get("variants") or [], list)


def variant_sku(product: dict, variant: dict) -> str:
    """Upstream SKU, or ``{productId}-{variantId}`` when it is blank."""
    sku = (variant.get("sku") or "").strip()
    return sku or f"{product.get('id')}-{variant.get('id')}"


def build_product_record(product: dict, variant: dict, stock: int) -> dict[str, Any]:
    variant_title = variant.get("title")
    if variant_title == "Default Title":
        variant_title = None

    return {
        "shopify_id": _optional_str(product.get("id")),
        "shopify_variant_id": _optional_str(variant.get("id")),
        "sku": variant_sku(product, variant),
        "barcode": _optional_str(variant.get("barcode")),
        "name": product.get("title") or "",
        "variant_title": variant_title,
        "price": _to_decimal(variant.get("price")),
        "current_stock": max(0, int(stock or 0)),
        "category": product.get("product_type") or DEFAULT_CATEGORY,
        "vendor": product.get("vendor") or None,
    }


def customer_display_name(order: dict) -> str:
    customer = order.get("customer") or {}
    full_name = (
        f"{customer.get('first_name') or ''} {customer.get('last_name') or ''}".strip()
    )
    return full_name or customer.get("name") or GUEST_CUSTOMER_NAME


def build_order_record(order: dict) -> dict[str, Any]:
    customer = order.get("customer") or {}
    shipping = order.get("shipping_address") or {}

    status = FulfillmentStatus.from_upstream(order.get("fulfillment_status"))
    if status is None:
        logger.warning(
            "Unknown fulfillment status %r on order %s, treating as unfulfilled",
            order.get("fulfillment_status"),
            order.get("id"),
        )
        status = FulfillmentStatus.UNFULFILLED

    cancelled_at = parse_iso_datetime(order.get("cancelled_at"))

    return {
        "shopify_id": str(order["id"]),
        "order_number": str(order.get("order_number") or order.get("name") or order["id"]),
        "email": order.get("email") or None,
        "customer_name": customer_display_name(order),
        "customer_email": customer.get("email") or order.get("email") or None,
        "shipping_city": shipping.get("city"),
        "total_price": _to_decimal(order.get("total_price")),
        "currency": order.get("currency") or "EUR",
        "fulfillment_status": status,
        "financial_status": order.get("financial_status") or "pending",
        "is_cancelled": cancelled_at is not None,
        "cancelled_at": cancelled_at,
        "note": order.get("note"),
        "tags": order.get("tags") or None,
        "shopify_created_at": parse_iso_datetime(order.get("created_at")),
        "shopify_updated_at": parse_iso_datetime(order.get("updated_at")),
    }


def build_line_item_record(line_item: dict, product_id) -> dict[str, Any]:
    return {
        "product_id": product_id,
        "shopify_line_item_id": _optional_str(line_item.get("id")),
        "shopify_product_id": _optional_str(line_item.get("product_id")),
        "shopify_variant_id": _optional_str(line_item.get("variant_id")),
        "title": line_item.get("title") or "",
        "variant_title": line_item.get("variant_title"),
        "sku": (line_item.get("sku") or "").strip(),
        "quantity": int(line_item.get("quantity") or 1),
        "price": _to_decimal(line_item.get("price")),
    }


# ---------------------------------------------------------------------------
# Synchronizer
# ---------------------------------------------------------------------------


class CatalogSynchronizer:
    """Brings local products and orders into agreement with Shopify."""

    def __init__(self, client: ShopifyClient, store: WarehouseStore):
        self.client = client
        self.store = store

    # =========================================================================
    # Products
    # =========================================================================

    async def sync_products(self) -> ProductSyncResult:
        """
        Fetch all product pages and upsert one local product per variant.

        Raises:
            ShopifyConfigError: credentials are missing (before any request).
            ShopifyError / httpx.HTTPError: the first page could not be fetched.
        """
        self.client.ensure_configured()

        products, pages_fetched, completed = await self._fetch_all_products()
        inventory = await self._fetch_inventory_levels(products)

        result = ProductSyncResult(
            total_products=len(products),
            pages_fetched=pages_fetched,
            completed=completed,
        )

        for product in products:
            if not _is_product_payload(product):
                logger.warning("Skipping malformed product payload: %r", product)
                result.errors += 1
                continue

            for variant in product.get("variants") or []:
                result.total_variants += 1
                if not isinstance(variant, dict):
                    logger.warning(
                        "Skipping malformed variant on product %s: %r",
                        product.get("id"),
                        variant,
                    )
                    result.errors += 1
                    continue

                try:
                    created = await self._upsert_variant(product, variant, inventory)
                    await self.store.commit()
                except Exception:
                    logger.exception(
                        "Failed to sync variant %s (product %s)",
                        variant.get("id"),
                        product.get("id"),
                    )
                    await self.store.rollback()
                    result.errors += 1
                    continue

                if created:
                    result.created += 1
                else:
                    result.updated += 1

        logger.info(result.message)
        return result

    async def _fetch_all_products(self) -> tuple[list[dict], int, bool]:
        products: list[dict] = []
        page_url: Optional[str] = None
        pages = 0

        while pages < MAX_PRODUCT_PAGES:
            try:
                page = await self.client.list_products_page(
                    page_url, limit=PRODUCT_PAGE_LIMIT
                )
            except (ShopifyError, httpx.HTTPError) as exc:
                if pages == 0:
                    raise
                logger.warning(
                    "Stopping product paging after page %d, keeping %d products: %s",
                    pages,
                    len(products),
                    exc,
                )
                return products, pages, False

            pages += 1
            products.extend(page.items)
            logger.info("Fetched product page %d (%d products)", pages, len(page.items))

            page_url = page.next_page_url
            if not page_url:
                return products, pages, True

        logger.warning("Reached the %d page cap while fetching products", MAX_PRODUCT_PAGES)
        return products, pages, False

    async def _fetch_inventory_levels(self, products: list[dict]) -> dict[str, int]:
        item_ids = [
            str(variant["inventory_item_id"])
            for product in products
            if _is_product_payload(product)
            for variant in product.get("variants") or []
            if isinstance(variant, dict) and variant.get("inventory_item_id")
        ]

        levels: dict[str, int] = {}
        for start in range(0, len(item_ids), INVENTORY_BATCH_SIZE):
            batch = item_ids[start : start + INVENTORY_BATCH_SIZE]
            try:
                levels.update(await self.client.get_inventory_levels(batch))
            except (ShopifyError, httpx.HTTPError) as exc:
                # Remaining variants fall back to their embedded inventory_quantity
                logger.warning("Inventory level fetch failed: %s", exc)
                break
        return levels

    async def _upsert_variant(
        self, product: dict, variant: dict, inventory: dict[str, int]
    ) -> bool:
        inventory_item_id = variant.get("inventory_item_id")
        if inventory_item_id and str(inventory_item_id) in inventory:
            stock = inventory[str(inventory_item_id)]
        else:
            stock = variant.get("inventory_quantity") or 0

        record = build_product_record(product, variant, stock)
        existing = await self.store.find_product_for_sync(
            record["shopify_variant_id"], record["sku"]
        )
        if existing is not None:
            if (
                existing.shopify_variant_id
                and record["shopify_variant_id"]
                and existing.shopify_variant_id != record["shopify_variant_id"]
            ):
                logger.warning(
                    "SKU %s is shared by Shopify variants %s and %s; "
                    "the local product now follows variant %s",
                    record["sku"],
                    existing.shopify_variant_id,
                    record["shopify_variant_id"],
                    record["shopify_variant_id"],
                )
            await self.store.update_product(existing, record)
            return False

        await self.store.create_product({**record, "min_stock": DEFAULT_MIN_STOCK})
        return True

    # =========================================================================
    # Orders
    # =========================================================================

    async def sync_orders(self) -> OrderSyncResult:
        """
        Import orders created in the last ORDER_LOOKBACK_DAYS days.

        Line items are diffed by Shopify line item id: changed rows are
        updated, new rows inserted, and rows no longer present deleted.
        """
        self.client.ensure_configured()

        window_start = days_ago(ORDER_LOOKBACK_DAYS)
        orders = await self.client.list_orders(window_start, limit=ORDER_PAGE_LIMIT)
        logger.info("Fetched %d orders created since %s", len(orders), window_start)

        result = OrderSyncResult(total_orders=len(orders), window_start=window_start)

        for payload in orders:
            try:
                order, created = await self.store.upsert_order(
                    build_order_record(payload)
                )
                item_counts = await self._reconcile_line_items(
                    order.id, payload.get("line_items") or []
                )
                await self.store.commit()
            except Exception:
                logger.exception("Failed to sync order %s", payload.get("id"))
                await self.store.rollback()
                result.errors += 1
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1
            result.items_created += item_counts[0]
            result.items_updated += item_counts[1]
            result.items_deleted += item_counts[2]

        logger.info(result.message)
        return result

    async def _reconcile_line_items(
        self, order_id, line_items: list[dict]
    ) -> tuple[int, int, int]:
        existing = await self.store.list_order_items(order_id)
        by_line_id = {
            item.shopify_line_item_id: item
            for item in existing
            if item.shopify_line_item_id
        }

        created = updated = deleted = 0
        kept: set[str] = set()

        for line_item in line_items:
            sku = (line_item.get("sku") or "").strip()
            product_id = await self.store.find_product_id_by_sku(sku) if sku else None
            record = build_line_item_record(line_item, product_id)

            line_id = record["shopify_line_item_id"]
            current = by_line_id.get(line_id) if line_id else None

            if current is None:
                await self.store.create_order_item(order_id, record)
                created += 1
                continue

            kept.add(line_id)
            changes = {
                key: value
                for key, value in record.items()
                if getattr(current, key) != value
            }
            if changes:
                await self.store.update_order_item(current, changes)
                updated += 1

        for item in existing:
            if item.shopify_line_item_id not in kept:
                await self.store.delete_order_item(item)
                deleted += 1

        return created, updated, deleted

    # =========================================================================
    # Scheduled sync
    # =========================================================================

    async def sync_all(self) -> FullSyncResult:
        """Products, then orders. An order failure keeps the product result."""
        products = await self.sync_products()

        try:
            orders = await self.sync_orders()
        except (ShopifyError, httpx.HTTPError) as exc:
            logger.error("Order sync failed during scheduled sync: %s", exc)
            return FullSyncResult(products=products, order_error=str(exc))

        return FullSyncResult(products=products, orders=orders)
