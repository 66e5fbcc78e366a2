"""Warehouse service routers package."""

from services.warehouse_service.routers.inventory import router as inventory_router
from services.warehouse_service.routers.locations import router as locations_router
from services.warehouse_service.routers.picking import router as picking_router
from services.warehouse_service.routers.products import router as products_router
from services.warehouse_service.routers.sync import router as sync_router

__all__ = [
    "inventory_router",
    "locations_router",
    "picking_router",
    "products_router",
    "sync_router",
]
