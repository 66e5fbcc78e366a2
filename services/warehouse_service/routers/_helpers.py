"""Shared helpers for warehouse routers."""

import httpx
from fastapi import HTTPException, status
from services.warehouse_service.services.exceptions import WarehouseError
from services.warehouse_service.shopify_client import ShopifyConfigError, ShopifyError

# Exceptions a Shopify call can surface to a router
UPSTREAM_ERRORS = (ShopifyError, httpx.HTTPError)


def http_error(exc: WarehouseError) -> HTTPException:
    """Translate a domain error into an HTTP error."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def upstream_error(exc: Exception) -> HTTPException:
    """Translate a Shopify or connection failure into an HTTP error."""
    if isinstance(exc, ShopifyConfigError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message
        )
    if isinstance(exc, ShopifyError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Shopify unreachable: {exc}"
    )
