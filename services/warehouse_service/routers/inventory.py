"""Inventory router: scanning, stock corrections, counts and movement history."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.warehouse_service.dependencies import get_warehouse_store
from services.warehouse_service.routers._helpers import http_error
from services.warehouse_service.schemas import (
    InventoryAdjustmentResponse,
    InventoryCountRequest,
    InventoryCountResponse,
    ProductResponse,
    StockAdjustmentRequest,
    StockMovementResponse,
)
from services.warehouse_service.services.exceptions import WarehouseError
from services.warehouse_service.services.inventory_ops import (
    CountEntry,
    adjust_stock,
    apply_inventory_count,
    list_low_stock,
    list_movements,
    lookup_product,
)
from services.warehouse_service.services.store import WarehouseStore

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("/lookup/{code}", response_model=ProductResponse)
async def lookup(
    code: str,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Find a product by barcode or SKU."""
    try:
        return await lookup_product(store, code)
    except WarehouseError as e:
        raise http_error(e)


@router.get("/low-stock", response_model=list[ProductResponse])
async def low_stock(
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    return await list_low_stock(store)


@router.get("/movements", response_model=list[StockMovementResponse])
async def movements(
    product_id: Optional[uuid.UUID] = None,
    limit: int = Query(100, ge=1, le=500),
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Recent stock movements, newest first."""
    try:
        return await list_movements(store, product_id, limit)
    except WarehouseError as e:
        raise http_error(e)


@router.post("/count", response_model=InventoryCountResponse)
async def submit_count(
    payload: InventoryCountRequest,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Apply a physical inventory count."""
    try:
        adjustments = await apply_inventory_count(
            store,
            [CountEntry(product_id=c.product_id, counted=c.counted) for c in payload.counts],
            adjusted_by=current_user.display_name,
        )
    except WarehouseError as e:
        raise http_error(e)

    return InventoryCountResponse(
        changed=len(adjustments),
        adjustments=[InventoryAdjustmentResponse.model_validate(a) for a in adjustments],
    )


@router.post("/{product_id}/adjust", response_model=ProductResponse)
async def adjust(
    product_id: uuid.UUID,
    adjustment: StockAdjustmentRequest,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Book a manual stock correction."""
    try:
        return await adjust_stock(
            store,
            product_id,
            adjustment.delta,
            performed_by=current_user.display_name,
            notes=adjustment.notes,
        )
    except WarehouseError as e:
        raise http_error(e)
