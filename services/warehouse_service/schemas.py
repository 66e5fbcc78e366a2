"""Pydantic schemas for the warehouse service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.warehouse_service.models import FulfillmentStatus, StockMovementType

# ============================================================================
# SYNC SCHEMAS
# ============================================================================


class ProductSyncResultSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    created: int
    updated: int
    errors: int
    total_products: int
    total_variants: int
    pages_fetched: int
    completed: bool


class OrderSyncResultSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    created: int
    updated: int
    errors: int
    total_orders: int
    items_created: int
    items_updated: int
    items_deleted: int
    window_start: Optional[datetime] = None


class ProductSyncResponse(BaseModel):
    success: bool = True
    message: str
    results: ProductSyncResultSchema


class OrderSyncResponse(BaseModel):
    success: bool = True
    message: str
    results: OrderSyncResultSchema


class FullSyncResponse(BaseModel):
    success: bool = True
    timestamp: datetime
    message: str
    products: ProductSyncResultSchema
    orders: Optional[OrderSyncResultSchema] = None
    order_error: Optional[str] = None


class ShopInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: Optional[str] = None
    domain: Optional[str] = None
    currency: Optional[str] = None
    shop_owner: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


# ============================================================================
# PICKING SCHEMAS
# ============================================================================


class OrderSelection(BaseModel):
    order_ids: list[uuid.UUID] = Field(default_factory=list)


class PickListOrderRefSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: Optional[uuid.UUID] = None
    order_number: str
    quantity: int
    customer_name: str


class PickListItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sku: str
    title: str
    storage_location: Optional[str] = None
    barcode: Optional[str] = None
    total_quantity: int
    orders: list[PickListOrderRefSchema]
    picked: bool = False


class PickListProgressSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    picked: int
    total: int
    remaining: int
    all_picked: bool


class PickListResponse(BaseModel):
    items: list[PickListItemSchema]
    order_count: int
    total_units: int
    progress: PickListProgressSchema


class CompletePickListResponse(BaseModel):
    updated: int
    message: str


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    title: str
    variant_title: Optional[str] = None
    sku: str
    quantity: int
    price: Decimal


class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    shopify_id: str
    order_number: str
    customer_name: str
    customer_email: Optional[str] = None
    shipping_city: Optional[str] = None
    total_price: Decimal
    currency: str
    fulfillment_status: FulfillmentStatus
    financial_status: Optional[str] = None
    is_cancelled: bool
    shopify_created_at: Optional[datetime] = None
    items: list[OrderItemResponse] = []


# ============================================================================
# INVENTORY SCHEMAS
# ============================================================================


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sku: str
    barcode: Optional[str] = None
    name: str
    variant_title: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    current_stock: int
    min_stock: int
    storage_location: Optional[str] = None
    last_inventory_update: Optional[datetime] = None


class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    barcode: Optional[str] = Field(None, max_length=100)
    variant_title: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    price: Decimal = Field(Decimal("0"), ge=0)
    current_stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    storage_location: Optional[str] = Field(None, max_length=50)


class BarcodeAssignment(BaseModel):
    barcode: str = Field(..., min_length=1, max_length=100)


class StockAdjustmentRequest(BaseModel):
    delta: int = Field(..., description="Units to add (positive) or remove (negative)")
    notes: Optional[str] = None


class CountEntrySchema(BaseModel):
    product_id: uuid.UUID
    counted: int = Field(..., ge=0)


class InventoryCountRequest(BaseModel):
    counts: list[CountEntrySchema] = Field(..., min_length=1)


class InventoryAdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: uuid.UUID
    old_quantity: int
    new_quantity: int
    difference: int
    reason: Optional[str] = None


class InventoryCountResponse(BaseModel):
    changed: int
    adjustments: list[InventoryAdjustmentResponse]


class StockMovementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    movement_type: StockMovementType
    quantity: int
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    notes: Optional[str] = None
    performed_by: Optional[str] = None
    created_at: Optional[datetime] = None


# ============================================================================
# LOCATION SCHEMAS
# ============================================================================


class StorageLocationCreate(BaseModel):
    code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=255)
    zone: Optional[str] = Field(None, max_length=20)
    aisle: Optional[str] = Field(None, max_length=20)
    shelf: Optional[str] = Field(None, max_length=20)
    level: Optional[str] = Field(None, max_length=20)
    capacity: int = Field(100, ge=0)
    is_active: bool = True


class StorageLocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: Optional[str] = None
    zone: Optional[str] = None
    aisle: Optional[str] = None
    shelf: Optional[str] = None
    level: Optional[str] = None
    capacity: int
    current_usage: int
    is_active: bool


class LocationAssignment(BaseModel):
    code: Optional[str] = Field(None, max_length=50)  # null clears the location


class StockTransferRequest(BaseModel):
    product_id: uuid.UUID
    from_location: str
    to_location: str
    quantity: int = Field(..., gt=0)
