"""Persistence boundary for the warehouse service.

The synchronizer, pick-list completion and inventory operations only talk to
a ``WarehouseStore``. Writes are staged by the mutating methods and become
durable on ``commit()``; callers decide the unit of work (one product, one
order, one count).
"""

import uuid
from typing import Any, Optional, Protocol, Sequence

from services.warehouse_service.models import (
    FulfillmentStatus,
    InventoryAdjustment,
    Order,
    OrderItem,
    Product,
    StockMovement,
    StorageLocation,
)
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload


class WarehouseStore(Protocol):
    """Operations the service layer needs from persistence."""

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    # Products
    async def get_product(self, product_id: uuid.UUID) -> Optional[Product]: ...

    async def find_product_for_sync(
        self, shopify_variant_id: Optional[str], sku: str
    ) -> Optional[Product]: ...

    async def find_product_by_code(self, code: str) -> Optional[Product]: ...

    async def find_product_id_by_sku(self, sku: str) -> Optional[uuid.UUID]: ...

    async def find_product_by_barcode(self, barcode: str) -> Optional[Product]: ...

    async def create_product(self, data: dict[str, Any]) -> Product: ...

    async def update_product(self, product: Product, data: dict[str, Any]) -> Product: ...

    async def list_low_stock_products(self) -> list[Product]: ...

    # Orders
    async def upsert_order(self, data: dict[str, Any]) -> tuple[Order, bool]: ...

    async def list_order_items(self, order_id: uuid.UUID) -> list[OrderItem]: ...

    async def create_order_item(
        self, order_id: uuid.UUID, data: dict[str, Any]
    ) -> OrderItem: ...

    async def update_order_item(
        self, item: OrderItem, data: dict[str, Any]
    ) -> OrderItem: ...

    async def delete_order_item(self, item: OrderItem) -> None: ...

    async def get_orders_with_items(
        self, order_ids: Sequence[uuid.UUID]
    ) -> list[Order]: ...

    async def list_orders(
        self, status: Optional[FulfillmentStatus] = None
    ) -> list[Order]: ...

    async def set_fulfillment_status(
        self, order_id: uuid.UUID, status: FulfillmentStatus
    ) -> Optional[Order]: ...

    # Inventory audit
    async def add_stock_movement(self, data: dict[str, Any]) -> StockMovement: ...

    async def add_inventory_adjustment(
        self, data: dict[str, Any]
    ) -> InventoryAdjustment: ...

    async def list_stock_movements(
        self, product_id: Optional[uuid.UUID] = None, limit: int = 100
    ) -> list[StockMovement]: ...

    # Locations
    async def get_location(self, code: str) -> Optional[StorageLocation]: ...

    async def list_locations(self) -> list[StorageLocation]: ...

    async def create_location(self, data: dict[str, Any]) -> StorageLocation: ...

    async def update_location(
        self, location: StorageLocation, data: dict[str, Any]
    ) -> StorageLocation: ...


def _apply(instance, data: dict[str, Any]):
    for key, value in data.items():
        setattr(instance, key, value)
    return instance


class SqlAlchemyWarehouseStore:
    """``WarehouseStore`` backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def get_product(self, product_id: uuid.UUID) -> Optional[Product]:
        return await self.db.get(Product, product_id)

    async def find_product_for_sync(
        self, shopify_variant_id: Optional[str], sku: str
    ) -> Optional[Product]:
        conditions = [Product.sku == sku]
        if shopify_variant_id:
            conditions.append(Product.shopify_variant_id == shopify_variant_id)

        result = await self.db.execute(select(Product).where(or_(*conditions)))
        matches = result.scalars().all()
        if not matches:
            return None

        # Prefer the variant-id match when SKU and variant id point at different rows
        for product in matches:
            if shopify_variant_id and product.shopify_variant_id == shopify_variant_id:
                return product
        return matches[0]

    async def find_product_by_code(self, code: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product)
            .where(or_(Product.barcode == code, Product.sku == code))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_product_id_by_sku(self, sku: str) -> Optional[uuid.UUID]:
        result = await self.db.execute(select(Product.id).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def find_product_by_barcode(self, barcode: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(Product.barcode == barcode).limit(1)
        )
        return result.scalar_one_or_none()

    async def create_product(self, data: dict[str, Any]) -> Product:
        product = Product(**data)
        self.db.add(product)
        await self.db.flush()
        return product

    async def update_product(self, product: Product, data: dict[str, Any]) -> Product:
        _apply(product, data)
        await self.db.flush()
        return product

    async def list_low_stock_products(self) -> list[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.current_stock <= Product.min_stock)
            .order_by(Product.current_stock, Product.sku)
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def upsert_order(self, data: dict[str, Any]) -> tuple[Order, bool]:
        result = await self.db.execute(
            select(Order).where(Order.shopify_id == data["shopify_id"])
        )
        order = result.scalar_one_or_none()
        created = order is None
        if created:
            order = Order(**data)
            self.db.add(order)
        else:
            _apply(order, data)
        await self.db.flush()
        return order, created

    async def list_order_items(self, order_id: uuid.UUID) -> list[OrderItem]:
        result = await self.db.execute(
            select(OrderItem).where(OrderItem.order_id == order_id)
        )
        return list(result.scalars().all())

    async def create_order_item(
        self, order_id: uuid.UUID, data: dict[str, Any]
    ) -> OrderItem:
        item = OrderItem(order_id=order_id, **data)
        self.db.add(item)
        await self.db.flush()
        return item

    async def update_order_item(
        self, item: OrderItem, data: dict[str, Any]
    ) -> OrderItem:
        _apply(item, data)
        await self.db.flush()
        return item

    async def delete_order_item(self, item: OrderItem) -> None:
        await self.db.delete(item)
        await self.db.flush()

    async def get_orders_with_items(
        self, order_ids: Sequence[uuid.UUID]
    ) -> list[Order]:
        if not order_ids:
            return []
        result = await self.db.execute(
            select(Order)
            .where(Order.id.in_(list(order_ids)))
            .options(selectinload(Order.items).selectinload(OrderItem.product))
        )
        by_id = {order.id: order for order in result.scalars().all()}
        # Keep the caller's selection order
        return [by_id[order_id] for order_id in order_ids if order_id in by_id]

    async def list_orders(
        self, status: Optional[FulfillmentStatus] = None
    ) -> list[Order]:
        query = select(Order).options(
            selectinload(Order.items).selectinload(OrderItem.product)
        )
        if status is not None:
            query = query.where(Order.fulfillment_status == status)
        query = query.order_by(Order.shopify_created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def set_fulfillment_status(
        self, order_id: uuid.UUID, status: FulfillmentStatus
    ) -> Optional[Order]:
        order = await self.db.get(Order, order_id)
        if order is None:
            return None
        order.fulfillment_status = status
        await self.db.flush()
        return order

    # ------------------------------------------------------------------
    # Inventory audit
    # ------------------------------------------------------------------

    async def add_stock_movement(self, data: dict[str, Any]) -> StockMovement:
        movement = StockMovement(**data)
        self.db.add(movement)
        await self.db.flush()
        return movement

    async def add_inventory_adjustment(
        self, data: dict[str, Any]
    ) -> InventoryAdjustment:
        adjustment = InventoryAdjustment(**data)
        self.db.add(adjustment)
        await self.db.flush()
        return adjustment

    async def list_stock_movements(
        self, product_id: Optional[uuid.UUID] = None, limit: int = 100
    ) -> list[StockMovement]:
        query = select(StockMovement)
        if product_id is not None:
            query = query.where(StockMovement.product_id == product_id)
        query = query.order_by(StockMovement.created_at.desc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    async def get_location(self, code: str) -> Optional[StorageLocation]:
        result = await self.db.execute(
            select(StorageLocation).where(StorageLocation.code == code)
        )
        return result.scalar_one_or_none()

    async def list_locations(self) -> list[StorageLocation]:
        result = await self.db.execute(
            select(StorageLocation).order_by(StorageLocation.code)
        )
        return list(result.scalars().all())

    async def create_location(self, data: dict[str, Any]) -> StorageLocation:
        location = StorageLocation(**data)
        self.db.add(location)
        await self.db.flush()
        return location

    async def update_location(
        self, location: StorageLocation, data: dict[str, Any]
    ) -> StorageLocation:
        _apply(location, data)
        await self.db.flush()
        return location
