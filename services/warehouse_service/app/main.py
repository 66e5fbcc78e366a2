"""FastAPI application for the Warehouse Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.warehouse_service.routers import (
    inventory_router,
    locations_router,
    picking_router,
    products_router,
    sync_router,
)


def create_app() -> FastAPI:
    """Create and configure the Warehouse Service FastAPI app."""
    app = FastAPI(
        title="Fireworks Warehouse Service",
        version="0.1.0",
        description="Stock, storage locations, order picking and Shopify sync.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "warehouse"}

    app.include_router(sync_router)
    app.include_router(picking_router)
    app.include_router(inventory_router)
    app.include_router(products_router)
    app.include_router(locations_router)

    return app


app = create_app()
