"""Storage location router."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.warehouse_service.dependencies import get_warehouse_store
from services.warehouse_service.routers._helpers import http_error
from services.warehouse_service.schemas import (
    LocationAssignment,
    ProductResponse,
    StockTransferRequest,
    StorageLocationCreate,
    StorageLocationResponse,
)
from services.warehouse_service.services.exceptions import WarehouseError
from services.warehouse_service.services.locations import (
    assign_product_location,
    create_location,
    transfer_stock,
)
from services.warehouse_service.services.store import WarehouseStore

router = APIRouter(tags=["locations"])


@router.get("/locations", response_model=list[StorageLocationResponse])
async def list_locations(
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    return await store.list_locations()


@router.post(
    "/locations",
    response_model=StorageLocationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_location(
    location_in: StorageLocationCreate,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Create a location; the code is generated from the address when omitted."""
    try:
        return await create_location(store, location_in.model_dump())
    except WarehouseError as e:
        raise http_error(e)


@router.post("/locations/transfer", response_model=ProductResponse)
async def transfer(
    transfer_in: StockTransferRequest,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Move stock of a product to another location."""
    try:
        return await transfer_stock(
            store,
            transfer_in.product_id,
            transfer_in.from_location,
            transfer_in.to_location,
            transfer_in.quantity,
            performed_by=current_user.display_name,
        )
    except WarehouseError as e:
        raise http_error(e)


@router.put("/products/{product_id}/location", response_model=ProductResponse)
async def set_product_location(
    product_id: uuid.UUID,
    assignment: LocationAssignment,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    try:
        return await assign_product_location(store, product_id, assignment.code)
    except WarehouseError as e:
        raise http_error(e)
