from contextlib import contextmanager
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from services.warehouse_service.app.main import app
from services.warehouse_service.dependencies import get_warehouse_store
from services.warehouse_service.shopify_client import get_shopify_client
from tests.fakes import FakeShopifyClient, InMemoryWarehouseStore


def make_staff_user(user_id: str = "staff-1", email: str = "lager@example.com") -> AuthUser:
    return AuthUser(user_id=user_id, email=email)


@contextmanager
def override_auth(target_app, user: AuthUser):
    """Temporarily act as `user` on `target_app`."""
    previous = target_app.dependency_overrides.get(get_current_user)
    target_app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            target_app.dependency_overrides.pop(get_current_user, None)
        else:
            target_app.dependency_overrides[get_current_user] = previous


@pytest.fixture
def store() -> InMemoryWarehouseStore:
    return InMemoryWarehouseStore()


@pytest.fixture
def shopify() -> FakeShopifyClient:
    return FakeShopifyClient()


@pytest.fixture
def cron_secret(monkeypatch):
    """Configure CRON_SECRET for the duration of a test."""
    monkeypatch.setenv("CRON_SECRET", "s3cret")
    get_settings.cache_clear()
    yield "s3cret"
    monkeypatch.delenv("CRON_SECRET", raising=False)
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def api_client(store, shopify) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient against the app, backed by the in-memory store and the fake
    Shopify client, with a logged-in staff member.
    """
    app.dependency_overrides[get_warehouse_store] = lambda: store
    app.dependency_overrides[get_shopify_client] = lambda: shopify
    app.dependency_overrides[get_current_user] = lambda: make_staff_user()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
