"""Unit tests for stock lookups, adjustments and inventory counts."""

import uuid

import pytest
from services.warehouse_service.models import StockMovementType
from services.warehouse_service.services.exceptions import (
    InvalidStockError,
    ProductConflictError,
    ProductNotFoundError,
)
from services.warehouse_service.services.inventory_ops import (
    COUNT_REASON,
    CountEntry,
    adjust_stock,
    apply_inventory_count,
    assign_barcode,
    create_product,
    list_low_stock,
    list_movements,
    lookup_product,
)

# ---------------------------------------------------------------------------
# lookup_product
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_lookup_by_barcode_or_sku(store):
    product = store.add_product(sku="FW-100", name="Batterie", barcode="4006381333931")

    assert await lookup_product(store, "4006381333931") is product
    assert await lookup_product(store, " FW-100 ") is product


@pytest.mark.asyncio
@pytest.mark.unit
async def test_lookup_unknown_code(store):
    with pytest.raises(ProductNotFoundError) as exc_info:
        await lookup_product(store, "0000")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.unit
async def test_lookup_blank_code(store):
    store.add_product(sku="FW-100", name="Batterie")

    with pytest.raises(ProductNotFoundError):
        await lookup_product(store, "   ")


# ---------------------------------------------------------------------------
# adjust_stock
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adjust_stock_records_movement(store):
    product = store.add_product(
        sku="FW-1", name="Batterie", current_stock=10, storage_location="A-01-01-1"
    )

    await adjust_stock(store, product.id, -4, performed_by="lager@example.com", notes="Bruch")

    assert product.current_stock == 6
    assert product.last_inventory_update is not None
    (movement,) = store.movements
    assert movement.movement_type == StockMovementType.ADJUSTMENT
    assert movement.quantity == -4
    assert movement.from_location == "A-01-01-1"
    assert movement.notes == "Bruch"
    assert movement.performed_by == "lager@example.com"
    assert store.commits == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adjust_stock_never_goes_negative(store):
    product = store.add_product(sku="FW-1", name="Batterie", current_stock=3)

    await adjust_stock(store, product.id, -10, performed_by="staff")

    assert product.current_stock == 0
    # The movement records what actually left the shelf
    assert store.movements[0].quantity == -3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adjust_stock_rejects_zero(store):
    product = store.add_product(sku="FW-1", name="Batterie")

    with pytest.raises(InvalidStockError):
        await adjust_stock(store, product.id, 0, performed_by="staff")

    assert store.movements == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adjust_stock_unknown_product(store):
    with pytest.raises(ProductNotFoundError):
        await adjust_stock(store, uuid.uuid4(), 1, performed_by="staff")


# ---------------------------------------------------------------------------
# apply_inventory_count
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_count_only_adjusts_changed_products(store):
    same = store.add_product(sku="A", name="A", current_stock=5)
    more = store.add_product(sku="B", name="B", current_stock=2)
    less = store.add_product(sku="C", name="C", current_stock=9)

    adjustments = await apply_inventory_count(
        store,
        [CountEntry(same.id, 5), CountEntry(more.id, 6), CountEntry(less.id, 0)],
        adjusted_by="inventur",
    )

    assert (same.current_stock, more.current_stock, less.current_stock) == (5, 6, 0)
    assert [(a.product_id, a.old_quantity, a.new_quantity, a.difference) for a in adjustments] == [
        (more.id, 2, 6, 4),
        (less.id, 9, 0, -9),
    ]
    assert all(a.reason == COUNT_REASON for a in adjustments)
    assert all(a.adjusted_by == "inventur" for a in adjustments)
    assert same.last_inventory_update is None
    assert store.commits == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_count_rejects_negative_quantities_before_writing(store):
    product = store.add_product(sku="A", name="A", current_stock=5)
    other = store.add_product(sku="B", name="B", current_stock=5)

    with pytest.raises(InvalidStockError):
        await apply_inventory_count(
            store, [CountEntry(product.id, 1), CountEntry(other.id, -1)], adjusted_by="x"
        )

    assert product.current_stock == 5
    assert store.adjustments == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_count_unknown_product(store):
    with pytest.raises(ProductNotFoundError):
        await apply_inventory_count(store, [CountEntry(uuid.uuid4(), 1)], adjusted_by="x")


# ---------------------------------------------------------------------------
# list_low_stock
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_low_stock_includes_products_at_minimum(store):
    store.add_product(sku="OK", name="OK", current_stock=6, min_stock=5)
    at_min = store.add_product(sku="AT", name="AT", current_stock=5, min_stock=5)
    empty = store.add_product(sku="EMPTY", name="EMPTY", current_stock=0, min_stock=5)

    low = await list_low_stock(store)

    assert low == [empty, at_min]
    assert all(p.is_low_stock for p in low)


# ---------------------------------------------------------------------------
# Manual products and barcode learning
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_books_opening_stock(store):
    product = await create_product(
        store,
        {"sku": " FW-NEU ", "name": "Wunderkerzen", "barcode": "", "current_stock": 12},
        performed_by="lager@example.com",
    )

    assert product.sku == "FW-NEU"
    assert product.barcode is None
    assert product.shopify_variant_id is None
    assert await lookup_product(store, "FW-NEU") is product
    (movement,) = store.movements
    assert movement.quantity == 12
    assert movement.movement_type == StockMovementType.ADJUSTMENT
    assert store.commits == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_without_stock_has_no_movement(store):
    await create_product(store, {"sku": "FW-0", "name": "Leer"}, performed_by="x")

    assert store.movements == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_rejects_taken_sku_and_barcode(store):
    store.add_product(sku="FW-1", name="Batterie", barcode="111")

    with pytest.raises(ProductConflictError):
        await create_product(store, {"sku": "FW-1", "name": "Kopie"}, performed_by="x")
    with pytest.raises(ProductConflictError):
        await create_product(
            store, {"sku": "FW-2", "name": "Kopie", "barcode": "111"}, performed_by="x"
        )

    assert len(store.products) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_requires_sku_and_name(store):
    with pytest.raises(InvalidStockError):
        await create_product(store, {"sku": "  ", "name": "Ohne SKU"}, performed_by="x")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_assign_barcode_makes_product_scannable(store):
    product = store.add_product(sku="FW-1", name="Batterie")

    await assign_barcode(store, product.id, " 4006381333931 ")

    assert product.barcode == "4006381333931"
    assert await lookup_product(store, "4006381333931") is product


@pytest.mark.asyncio
@pytest.mark.unit
async def test_assign_barcode_conflicts_with_other_product(store):
    store.add_product(sku="FW-1", name="Batterie", barcode="111")
    other = store.add_product(sku="FW-2", name="Rakete")

    with pytest.raises(ProductConflictError):
        await assign_barcode(store, other.id, "111")

    assert other.barcode is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_assign_same_barcode_again_is_a_no_op(store):
    product = store.add_product(sku="FW-1", name="Batterie", barcode="111")

    assert await assign_barcode(store, product.id, "111") is product
    assert store.commits == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_assign_barcode_validation(store):
    with pytest.raises(InvalidStockError):
        await assign_barcode(store, uuid.uuid4(), "  ")
    with pytest.raises(ProductNotFoundError):
        await assign_barcode(store, uuid.uuid4(), "111")


# ---------------------------------------------------------------------------
# Movement history
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_movements_newest_first_and_filtered(store):
    first = store.add_product(sku="FW-1", name="Batterie", current_stock=10)
    second = store.add_product(sku="FW-2", name="Rakete", current_stock=10)
    await adjust_stock(store, first.id, -1, performed_by="x")
    await adjust_stock(store, second.id, 2, performed_by="x")
    await adjust_stock(store, first.id, 3, performed_by="x")

    everything = await list_movements(store)
    for_first = await list_movements(store, first.id)
    latest = await list_movements(store, limit=1)

    assert [m.quantity for m in everything] == [3, 2, -1]
    assert [m.quantity for m in for_first] == [3, -1]
    assert [m.quantity for m in latest] == [3]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_movements_unknown_product(store):
    with pytest.raises(ProductNotFoundError):
        await list_movements(store, uuid.uuid4())
