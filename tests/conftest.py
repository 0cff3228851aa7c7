from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from mistock.core.auth import create_access_token
from mistock.core.config import Settings
from mistock.main import create_app
from mistock.models.ledger import LedgerKind
from mistock.models.line_item import AvailableItem
from mistock.models.user import Actor, LoginResult, Role
from mistock.services.container import build_services


@pytest.fixture
def test_settings() -> Settings:
    """In-memory settings; nothing touches MongoDB."""
    return Settings(
        ENVIRONMENT="test",
        STORAGE_BACKEND="memory",
        LOCK_TIMEOUT_SECONDS=1.0,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def services(test_settings):
    return build_services(test_settings)


@pytest.fixture
def cashier() -> Actor:
    return Actor(email="cashier@example.com", full_name="Chidi Okeke", role=Role.USER)


@pytest.fixture
def admin() -> Actor:
    return Actor(email="admin@example.com", full_name="Amaka Obi", role=Role.ADMIN)


@pytest.fixture
def item_a() -> AvailableItem:
    return AvailableItem(sku="A", name="Rice 5kg", available_quantity=10, unit_price_cents=100, cost_price_cents=40)


@pytest.fixture
def item_b() -> AvailableItem:
    return AvailableItem(sku="B", name="Palm oil 1L", available_quantity=5, unit_price_cents=150)


@pytest.fixture
def item_c() -> AvailableItem:
    return AvailableItem(sku="C", name="Tomato paste", available_quantity=3, unit_price_cents=200)


@pytest_asyncio.fixture
async def sale_ledger(services, item_a):
    """Open sale ledger with 2 x A (subtotal 200)."""
    ledger = await services.ledger.open_ledger(LedgerKind.SALE)
    return await services.ledger.add_line(ledger.id, item_a, 2)


@pytest_asyncio.fixture
async def requisition_ledger(services, item_a, item_b, item_c):
    """Requisition ledger with three active lines, subtotal 450."""
    ledger = await services.ledger.open_ledger(LedgerKind.REQUISITION)
    for item in (item_a, item_b, item_c):
        ledger = await services.ledger.add_line(ledger.id, item, 1)
    return ledger


@pytest.fixture
def mock_db():
    """Motor database double: every collection is the same MagicMock with async methods."""
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.replace_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.count_documents = AsyncMock(return_value=0)

    db = MagicMock()
    db.__getitem__.return_value = collection
    return db


@pytest.fixture
def test_client(test_settings):
    """FastAPI test client; the context manager runs the lifespan that builds services."""
    app = create_app(test_settings)
    with TestClient(app) as client:
        yield client


def bearer(email: str, full_name: str, designation: str) -> dict:
    token = create_access_token(LoginResult(email=email, full_name=full_name, designation=designation))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def cashier_headers() -> dict:
    return bearer("cashier@example.com", "Chidi Okeke", "Cashier")


@pytest.fixture
def admin_headers() -> dict:
    return bearer("admin@example.com", "Amaka Obi", "Admin")
