"""FastAPI dependencies wiring the store and Shopify client into routers."""

from fastapi import Depends
from libs.db.session import get_async_db
from services.warehouse_service.services.store import (
    SqlAlchemyWarehouseStore,
    WarehouseStore,
)
from services.warehouse_service.services.sync import CatalogSynchronizer
from services.warehouse_service.shopify_client import ShopifyClient, get_shopify_client
from sqlalchemy.ext.asyncio import AsyncSession


async def get_warehouse_store(
    db: AsyncSession = Depends(get_async_db),
) -> WarehouseStore:
    return SqlAlchemyWarehouseStore(db)


async def get_synchronizer(
    client: ShopifyClient = Depends(get_shopify_client),
    store: WarehouseStore = Depends(get_warehouse_store),
) -> CatalogSynchronizer:
    return CatalogSynchronizer(client, store)
