"""
Shopify Admin REST API client.

Provides async methods for:
- Paging through products (cursor links in the ``Link`` header)
- Fetching inventory levels for a batch of inventory items
- Listing recent orders
- Reading basic shop information
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

import httpx
from libs.common.config import get_settings

logger = logging.getLogger(__name__)

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


@dataclass
class ShopifyPage:
    """One page of a paginated listing."""

    items: list[dict] = field(default_factory=list)
    next_page_url: Optional[str] = None


@dataclass
class ShopInfo:
    """Subset of the shop resource shown on the sync screen."""

    name: str
    email: Optional[str]
    domain: Optional[str]
    currency: Optional[str]
    shop_owner: Optional[str]
    city: Optional[str]
    country: Optional[str]


class ShopifyError(Exception):
    """Base exception for Shopify API errors."""

    def __init__(
        self, message: str, status_code: int = None, response_data: Any = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


class ShopifyConfigError(ShopifyError):
    """Raised before any request when credentials are missing."""


def parse_next_link(link_header: Optional[str]) -> Optional[str]:
    """Extract the ``rel="next"`` URL from a Shopify ``Link`` header."""
    if not link_header:
        return None
    match = _NEXT_LINK_RE.search(link_header)
    return match.group(1) if match else None


class ShopifyClient:
    """Async client for the Shopify Admin REST API."""

    def __init__(
        self,
        store_domain: str = None,
        access_token: str = None,
        api_version: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        settings = get_settings()
        self.store_domain = (
            store_domain if store_domain is not None else settings.SHOPIFY_STORE_DOMAIN
        )
        self.access_token = (
            access_token if access_token is not None else settings.SHOPIFY_ACCESS_TOKEN
        )
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout or settings.SHOPIFY_TIMEOUT
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.store_domain and self.access_token)

    @property
    def base_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}"

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise ShopifyConfigError("Shopify credentials not configured")

    async def _request(
        self,
        method: str,
        url: str,
        params: dict = None,
    ) -> httpx.Response:
        """Make an async request to the Admin API and fail on non-2xx."""
        self.ensure_configured()

        headers = {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
            )

        if not response.is_success:
            logger.error(
                f"Shopify API error: {response.status_code} - {response.text[:500]}"
            )
            raise ShopifyError(
                message=f"Shopify API error: {response.status_code}",
                status_code=response.status_code,
                response_data=response.text,
            )

        return response

    async def _get_json(self, url: str, params: dict = None) -> tuple[dict, httpx.Response]:
        response = await self._request("GET", url, params=params)
        try:
            data = response.json()
        except ValueError as exc:
            raise ShopifyError(
                message="Malformed response from Shopify",
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise ShopifyError(
                message="Malformed response from Shopify",
                status_code=response.status_code,
                response_data=data,
            )
        return data, response

    # =========================================================================
    # Products
    # =========================================================================

    async def list_products_page(
        self, page_url: Optional[str] = None, limit: int = 250
    ) -> ShopifyPage:
        """
        Fetch one page of products.

        Args:
            page_url: Full URL from a previous page's ``next_page_url``. The
                first page is requested when omitted.
            limit: Page size (Shopify caps this at 250).

        Returns:
            ShopifyPage with the raw product dicts and the next page URL.
        """
        if page_url:
            # Cursor URLs already carry page_info and limit
            data, response = await self._get_json(page_url)
        else:
            data, response = await self._get_json(
                f"{self.base_url}/products.json", params={"limit": limit}
            )

        return ShopifyPage(
            items=list(data.get("products") or []),
            next_page_url=parse_next_link(response.headers.get("Link")),
        )

    async def get_inventory_levels(
        self, inventory_item_ids: Iterable[str]
    ) -> dict[str, int]:
        """
        Available quantity per inventory item, summed over all locations.

        Args:
            inventory_item_ids: One batch of ids (Shopify accepts up to 50).

        Returns:
            Mapping of inventory item id (as string) to available quantity.
        """
        ids = [str(i) for i in inventory_item_ids]
        if not ids:
            return {}

        data, _ = await self._get_json(
            f"{self.base_url}/inventory_levels.json",
            params={"inventory_item_ids": ",".join(ids), "limit": 250},
        )

        levels: dict[str, int] = {}
        for level in data.get("inventory_levels") or []:
            try:
                item_id = str(level["inventory_item_id"])
                available = int(level.get("available") or 0)
            except (KeyError, TypeError, ValueError, AttributeError):
                # Item falls back to the variant's inventory_quantity
                logger.warning("Skipping malformed inventory level: %r", level)
                continue
            levels[item_id] = levels.get(item_id, 0) + available
        return levels

    # =========================================================================
    # Orders
    # =========================================================================

    async def list_orders(
        self, created_at_min: datetime, limit: int = 250, status: str = "any"
    ) -> list[dict]:
        """
        Fetch orders created since `created_at_min` (single page).
        """
        data, _ = await self._get_json(
            f"{self.base_url}/orders.json",
            params={
                "status": status,
                "created_at_min": created_at_min.isoformat(),
                "limit": limit,
            },
        )
        return list(data.get("orders") or [])

    # =========================================================================
    # Shop
    # =========================================================================

    async def get_shop(self) -> ShopInfo:
        data, _ = await self._get_json(f"{self.base_url}/shop.json")
        shop = data.get("shop") or {}
        return ShopInfo(
            name=shop.get("name", ""),
            email=shop.get("email"),
            domain=shop.get("domain"),
            currency=shop.get("currency"),
            shop_owner=shop.get("shop_owner"),
            city=shop.get("city"),
            country=shop.get("country"),
        )


def get_shopify_client() -> ShopifyClient:
    """FastAPI dependency returning a client built from settings."""
    return ShopifyClient()
