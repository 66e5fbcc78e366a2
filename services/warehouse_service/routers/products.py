"""Product router: manual entry and barcode learning."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.warehouse_service.dependencies import get_warehouse_store
from services.warehouse_service.routers._helpers import http_error
from services.warehouse_service.schemas import (
    BarcodeAssignment,
    ProductCreate,
    ProductResponse,
)
from services.warehouse_service.services.exceptions import WarehouseError
from services.warehouse_service.services.inventory_ops import (
    assign_barcode,
    create_product,
)
from services.warehouse_service.services.store import WarehouseStore

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def add_product(
    product_in: ProductCreate,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Create a product that does not come from Shopify."""
    try:
        return await create_product(
            store, product_in.model_dump(), performed_by=current_user.display_name
        )
    except WarehouseError as e:
        raise http_error(e)


@router.put("/{product_id}/barcode", response_model=ProductResponse)
async def set_barcode(
    product_id: uuid.UUID,
    assignment: BarcodeAssignment,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    try:
        return await assign_barcode(store, product_id, assignment.barcode)
    except WarehouseError as e:
        raise http_error(e)
