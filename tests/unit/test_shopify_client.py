"""Unit tests for the Shopify Admin REST client, using httpx.MockTransport."""

import json
from datetime import datetime, timezone

import httpx
import pytest
from services.warehouse_service.services.sync import CatalogSynchronizer
from services.warehouse_service.shopify_client import (
    ShopifyClient,
    ShopifyConfigError,
    ShopifyError,
    parse_next_link,
)
from tests.factories import shopify_product, shopify_variant
from tests.fakes import InMemoryWarehouseStore

NEXT_URL = (
    "https://shop.myshopify.com/admin/api/2024-01/products.json"
    "?limit=250&page_info=abc123"
)


def _client(handler) -> ShopifyClient:
    return ShopifyClient(
        store_domain="shop.myshopify.com",
        access_token="shpat_test",
        api_version="2024-01",
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# Link header parsing
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_parse_next_link():
    header = (
        '<https://shop.myshopify.com/admin/api/2024-01/products.json?page_info=prev>; rel="previous", '
        f'<{NEXT_URL}>; rel="next"'
    )

    assert parse_next_link(header) == NEXT_URL
    assert parse_next_link('<https://x/products.json?page_info=p>; rel="previous"') is None
    assert parse_next_link(None) is None
    assert parse_next_link("") is None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_products_page_sends_token_and_reads_next_link():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"products": [{"id": 1, "title": "Batterie"}]},
            headers={"Link": f'<{NEXT_URL}>; rel="next"'},
        )

    page = await _client(handler).list_products_page()

    assert page.items == [{"id": 1, "title": "Batterie"}]
    assert page.next_page_url == NEXT_URL
    request = seen[0]
    assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
    assert request.url.path == "/admin/api/2024-01/products.json"
    assert request.url.params["limit"] == "250"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_products_page_follows_cursor_url_verbatim():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"products": []})

    page = await _client(handler).list_products_page(NEXT_URL)

    assert seen == [NEXT_URL]
    assert page.items == []
    assert page.next_page_url is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_non_2xx_raises_shopify_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    with pytest.raises(ShopifyError) as exc_info:
        await _client(handler).list_products_page()

    assert exc_info.value.status_code == 500
    assert "500" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.unit
async def test_malformed_body_raises_shopify_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(ShopifyError, match="Malformed"):
        await _client(handler).get_shop()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_credentials_fail_before_any_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    client = ShopifyClient(
        store_domain="", access_token="", transport=httpx.MockTransport(handler)
    )

    assert client.is_configured is False
    with pytest.raises(ShopifyConfigError):
        await client.list_products_page()
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_inventory_levels_are_summed_per_item():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params["inventory_item_ids"])
        return httpx.Response(
            200,
            json={
                "inventory_levels": [
                    {"inventory_item_id": 11, "location_id": 1, "available": 4},
                    {"inventory_item_id": 11, "location_id": 2, "available": 3},
                    {"inventory_item_id": 12, "location_id": 1, "available": None},
                ]
            },
        )

    levels = await _client(handler).get_inventory_levels(["11", 12])

    assert seen == ["11,12"]
    assert levels == {"11": 7, "12": 0}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_malformed_inventory_levels_are_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "inventory_levels": [
                    {"inventory_item_id": 11, "available": "n/a"},
                    {"available": 2},
                    "garbage",
                    {"inventory_item_id": 12, "available": 5},
                ]
            },
        )

    levels = await _client(handler).get_inventory_levels(["11", "12"])

    assert levels == {"12": 5}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sync_uses_variant_quantity_when_level_is_malformed():
    product = shopify_product(
        variants=[shopify_variant(sku="FW-1", inventory_item_id=111, inventory_quantity=4)]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/products.json"):
            return httpx.Response(200, json={"products": [product]})
        return httpx.Response(
            200, json={"inventory_levels": [{"inventory_item_id": 111, "available": "n/a"}]}
        )

    store = InMemoryWarehouseStore()
    result = await CatalogSynchronizer(_client(handler), store).sync_products()

    assert (result.created, result.errors) == (1, 0)
    (stored,) = store.products.values()
    assert stored.current_stock == 4


@pytest.mark.asyncio
@pytest.mark.unit
async def test_inventory_levels_skip_request_for_empty_batch():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _client(handler).get_inventory_levels([]) == {}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_orders_passes_window_and_status():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return httpx.Response(200, content=json.dumps({"orders": [{"id": 5}]}))

    since = datetime(2026, 7, 1, tzinfo=timezone.utc)
    orders = await _client(handler).list_orders(since)

    assert orders == [{"id": 5}]
    assert seen[0]["status"] == "any"
    assert seen[0]["created_at_min"] == since.isoformat()
    assert seen[0]["limit"] == "250"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_shop():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/shop.json")
        return httpx.Response(
            200,
            json={"shop": {"name": "Feuerwerk Lager", "currency": "EUR", "country": "DE"}},
        )

    shop = await _client(handler).get_shop()

    assert shop.name == "Feuerwerk Lager"
    assert shop.currency == "EUR"
    assert shop.email is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_connection_errors_propagate_as_httpx_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.HTTPError):
        await _client(handler).get_shop()
