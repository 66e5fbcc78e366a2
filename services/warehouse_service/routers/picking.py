"""Order picking router."""

from typing import Optional

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from services.warehouse_service.dependencies import get_warehouse_store
from services.warehouse_service.models import FulfillmentStatus
from services.warehouse_service.routers._helpers import http_error
from services.warehouse_service.schemas import (
    CompletePickListResponse,
    OrderSelection,
    OrderSummary,
    PickListItemSchema,
    PickListProgressSchema,
    PickListResponse,
)
from services.warehouse_service.services.exceptions import WarehouseError
from services.warehouse_service.services.picklist import (
    complete_pick_list,
    load_pick_list,
    order_ids_in,
    pick_list_progress,
)
from services.warehouse_service.services.store import WarehouseStore

router = APIRouter(prefix="/picking", tags=["picking"])
logger = get_logger(__name__)


@router.get("/orders", response_model=list[OrderSummary])
async def list_orders(
    status: Optional[FulfillmentStatus] = FulfillmentStatus.UNFULFILLED,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Orders available for picking (unfulfilled by default)."""
    orders = await store.list_orders(status)
    return [OrderSummary.model_validate(order) for order in orders]


@router.post("/pick-list", response_model=PickListResponse)
async def create_pick_list(
    selection: OrderSelection,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Merge the selected orders into one route-ordered pick list."""
    try:
        items = await load_pick_list(store, selection.order_ids)
    except WarehouseError as e:
        raise http_error(e)

    return PickListResponse(
        items=[PickListItemSchema.model_validate(item) for item in items],
        order_count=len(order_ids_in(items)),
        total_units=sum(item.total_quantity for item in items),
        progress=PickListProgressSchema.model_validate(pick_list_progress(items)),
    )


@router.post("/complete", response_model=CompletePickListResponse)
async def complete_picking(
    selection: OrderSelection,
    current_user: AuthUser = Depends(get_current_user),
    store: WarehouseStore = Depends(get_warehouse_store),
):
    """Mark the picked orders as fulfilled."""
    try:
        updated = await complete_pick_list(store, selection.order_ids)
    except WarehouseError as e:
        raise http_error(e)

    logger.info(f"{current_user.display_name} completed picking of {updated} order(s)")
    return CompletePickListResponse(
        updated=updated, message=f"{updated} order(s) marked as fulfilled"
    )
