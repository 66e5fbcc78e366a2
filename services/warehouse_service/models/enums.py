"""Enum definitions for warehouse models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class FulfillmentStatus(str, enum.Enum):
    UNFULFILLED = "unfulfilled"
    PARTIAL = "partial"
    FULFILLED = "fulfilled"

    @classmethod
    def from_upstream(cls, value):
        """Map Shopify's fulfillment_status (null means nothing shipped yet)."""
        if not value:
            return cls.UNFULFILLED
        try:
            return cls(value)
        except ValueError:
            return None


class StockMovementType(str, enum.Enum):
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"
    COUNT = "count"
    FULFILLMENT = "fulfillment"
