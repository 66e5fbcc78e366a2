"""Shopify synchronization router."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user, verify_cron_secret
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.warehouse_service.dependencies import get_synchronizer
from services.warehouse_service.routers._helpers import UPSTREAM_ERRORS, upstream_error
from services.warehouse_service.schemas import (
    FullSyncResponse,
    OrderSyncResponse,
    OrderSyncResultSchema,
    ProductSyncResponse,
    ProductSyncResultSchema,
    ShopInfoResponse,
)
from services.warehouse_service.services.sync import CatalogSynchronizer
from services.warehouse_service.shopify_client import (
    ShopifyClient,
    get_shopify_client,
)

router = APIRouter(prefix="/sync", tags=["sync"])
logger = get_logger(__name__)


@router.post("/products", response_model=ProductSyncResponse)
async def sync_products(
    current_user: AuthUser = Depends(get_current_user),
    synchronizer: CatalogSynchronizer = Depends(get_synchronizer),
):
    """Pull the Shopify catalog and upsert local products."""
    try:
        result = await synchronizer.sync_products()
    except UPSTREAM_ERRORS as e:
        logger.error(f"Product sync failed: {e}")
        raise upstream_error(e)

    return ProductSyncResponse(
        message=result.message,
        results=ProductSyncResultSchema.model_validate(result),
    )


@router.post("/orders", response_model=OrderSyncResponse)
async def sync_orders(
    current_user: AuthUser = Depends(get_current_user),
    synchronizer: CatalogSynchronizer = Depends(get_synchronizer),
):
    """Import orders from the last 90 days."""
    try:
        result = await synchronizer.sync_orders()
    except UPSTREAM_ERRORS as e:
        logger.error(f"Order sync failed: {e}")
        raise upstream_error(e)

    return OrderSyncResponse(
        message=result.message,
        results=OrderSyncResultSchema.model_validate(result),
    )


@router.get(
    "/cron",
    response_model=FullSyncResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def scheduled_sync(
    synchronizer: CatalogSynchronizer = Depends(get_synchronizer),
):
    """Products then orders, triggered by the scheduler."""
    logger.info("Starting scheduled sync")
    try:
        result = await synchronizer.sync_all()
    except UPSTREAM_ERRORS as e:
        logger.error(f"Scheduled sync failed: {e}")
        raise upstream_error(e)

    message = result.products.message
    if result.orders is not None:
        message = f"{message}; {result.orders.message}"

    return FullSyncResponse(
        timestamp=utc_now(),
        message=message,
        products=ProductSyncResultSchema.model_validate(result.products),
        orders=(
            OrderSyncResultSchema.model_validate(result.orders)
            if result.orders is not None
            else None
        ),
        order_error=result.order_error,
    )


@router.get("/shop", response_model=ShopInfoResponse)
async def shop_info(
    current_user: AuthUser = Depends(get_current_user),
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Basic information about the connected shop."""
    try:
        shop = await client.get_shop()
    except UPSTREAM_ERRORS as e:
        raise upstream_error(e)
    return ShopInfoResponse.model_validate(shop)
