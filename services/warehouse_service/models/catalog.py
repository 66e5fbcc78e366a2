"""Catalog models: products and the storage locations they live in."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

DEFAULT_MIN_STOCK = 5


class Product(Base):
    """One sellable variant (e.g., 'Vulkan Batterie 100 Schuss')."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Shopify identity
    shopify_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    shopify_variant_id: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, index=True, nullable=True
    )

    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    barcode: Mapped[Optional[str]] = mapped_column(
        String(100), index=True, nullable=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    variant_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    vendor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )

    # Stock
    current_stock: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    min_stock: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_MIN_STOCK, server_default=str(DEFAULT_MIN_STOCK)
    )
    storage_location: Mapped[Optional[str]] = mapped_column(
        String(50), index=True, nullable=True
    )  # StorageLocation.code, not enforced as FK
    last_inventory_update: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="product_positive_stock"),
        CheckConstraint("min_stock >= 0", name="product_positive_min_stock"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock

    def __repr__(self):
        return f"<Product {self.sku} stock={self.current_stock}>"


class StorageLocation(Base):
    """A physical shelf/bin, addressed by zone, aisle, shelf and level."""

    __tablename__ = "storage_locations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    zone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    aisle: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    shelf: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    capacity: Mapped[int] = mapped_column(Integer, default=100, server_default="100")
    current_usage: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<StorageLocation {self.code} {self.current_usage}/{self.capacity}>"
