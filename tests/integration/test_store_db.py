"""Tests for the SQLAlchemy-backed store against a real database.

Skipped when the test database is not reachable.
"""

from datetime import timedelta

import pytest
from libs.common.datetime_utils import utc_now
from services.warehouse_service.models import FulfillmentStatus, StockMovementType
from services.warehouse_service.services.inventory_ops import assign_barcode
from services.warehouse_service.services.picklist import (
    complete_pick_list,
    load_pick_list,
)
from services.warehouse_service.services.store import SqlAlchemyWarehouseStore
from services.warehouse_service.services.sync import CatalogSynchronizer
from tests.factories import (
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    shopify_line_item,
    shopify_order,
    shopify_product,
    shopify_variant,
)
from tests.fakes import FakeShopifyClient


@pytest.mark.asyncio
@pytest.mark.integration
async def test_find_product_for_sync_prefers_variant_id(db_session):
    by_sku = ProductFactory.create(sku="FW-1", shopify_variant_id="111")
    by_variant = ProductFactory.create(sku="FW-OLD", shopify_variant_id="222")
    db_session.add_all([by_sku, by_variant])
    await db_session.commit()

    store = SqlAlchemyWarehouseStore(db_session)

    assert await store.find_product_for_sync("222", "FW-1") is by_variant
    assert await store.find_product_for_sync(None, "FW-1") is by_sku
    assert await store.find_product_for_sync("999", "NOPE") is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_find_product_by_barcode_or_sku(db_session):
    product = ProductFactory.create(sku="FW-7", barcode="4006381333931")
    db_session.add(product)
    await db_session.commit()

    store = SqlAlchemyWarehouseStore(db_session)

    assert (await store.find_product_by_code("4006381333931")).id == product.id
    assert (await store.find_product_by_code("FW-7")).id == product.id
    assert await store.find_product_id_by_sku("FW-7") == product.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_barcode_assignment_and_movement_history(db_session):
    product = ProductFactory.create(sku="FW-8", barcode=None)
    db_session.add(product)
    await db_session.commit()
    store = SqlAlchemyWarehouseStore(db_session)

    await assign_barcode(store, product.id, "4006381333948")
    now = utc_now()
    for minutes, quantity in ((10, -1), (5, 4)):
        await store.add_stock_movement(
            {
                "product_id": product.id,
                "movement_type": StockMovementType.ADJUSTMENT,
                "quantity": quantity,
                "created_at": now - timedelta(minutes=minutes),
            }
        )
    await store.commit()

    assert (await store.find_product_by_barcode("4006381333948")).id == product.id
    movements = await store.list_stock_movements(product.id)
    assert [m.quantity for m in movements] == [4, -1]
    assert len(await store.list_stock_movements(product.id, limit=1)) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_orders_with_items_keeps_selection_order(db_session):
    product = ProductFactory.create(sku="FW-1", storage_location="A-01-01-1")
    first, second = OrderFactory.create(), OrderFactory.create()
    db_session.add_all([product, first, second])
    await db_session.flush()
    db_session.add_all(
        [
            OrderItemFactory.create(order_id=first.id, sku="FW-1", product_id=product.id),
            OrderItemFactory.create(order_id=second.id, sku="FW-2"),
        ]
    )
    await db_session.commit()

    store = SqlAlchemyWarehouseStore(db_session)
    orders = await store.get_orders_with_items([second.id, first.id])

    assert [o.id for o in orders] == [second.id, first.id]
    assert orders[1].items[0].product.storage_location == "A-01-01-1"
    assert orders[0].items[0].product is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_low_stock_query(db_session):
    db_session.add_all(
        [
            ProductFactory.create(sku="OK", current_stock=9, min_stock=5),
            ProductFactory.create(sku="LOW", current_stock=1, min_stock=5),
        ]
    )
    await db_session.commit()

    low = await SqlAlchemyWarehouseStore(db_session).list_low_stock_products()

    assert [p.sku for p in low] == ["LOW"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sync_pick_and_complete_round_trip(db_session):
    """Sync catalog and orders, build a pick list, then complete it."""
    store = SqlAlchemyWarehouseStore(db_session)
    client = FakeShopifyClient(
        [[shopify_product(variants=[shopify_variant(sku="FW-100", inventory_quantity=12)])]],
        orders=[
            shopify_order(line_items=[shopify_line_item(id=1, sku="FW-100", quantity=2)]),
            shopify_order(line_items=[shopify_line_item(id=2, sku="FW-100", quantity=3)]),
        ],
    )

    result = await CatalogSynchronizer(client, store).sync_all()
    assert result.products.created == 1
    assert result.orders.created == 2

    orders = await store.list_orders(FulfillmentStatus.UNFULFILLED)
    items = await load_pick_list(store, [o.id for o in orders])

    assert len(items) == 1
    assert items[0].sku == "FW-100"
    assert items[0].total_quantity == 5

    assert await complete_pick_list(store, [o.id for o in orders]) == 2
    assert await store.list_orders(FulfillmentStatus.UNFULFILLED) == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_resync_updates_line_items_in_place(db_session):
    store = SqlAlchemyWarehouseStore(db_session)
    line = shopify_line_item(id=10, sku="FW-1", quantity=1)
    client = FakeShopifyClient(orders=[shopify_order(id=4242, line_items=[line])])
    synchronizer = CatalogSynchronizer(client, store)

    await synchronizer.sync_orders()
    (order,) = await store.list_orders()
    (original,) = await store.list_order_items(order.id)

    client.orders = [shopify_order(id=4242, line_items=[{**line, "quantity": 6}])]
    result = await synchronizer.sync_orders()

    (updated,) = await store.list_order_items(order.id)
    assert result.items_updated == 1
    assert updated.id == original.id
    assert updated.quantity == 6


@pytest.mark.asyncio
@pytest.mark.integration
async def test_location_endpoints_against_database(db_client):
    created = await db_client.post("/locations", json={"zone": "c", "aisle": "1"})
    listing = await db_client.get("/locations")

    assert created.status_code == 201, created.text
    assert created.json()["code"] == "C-1-S-B"
    assert [loc["code"] for loc in listing.json()] == ["C-1-S-B"]
