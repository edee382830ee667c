"""
Centralized Test Configuration.

Every test gets its own SQLite file under tmp_path, so concurrent
connections see the same database and nothing leaks between tests.
"""

from datetime import date

import pytest
from httpx import AsyncClient, ASGITransport

from ledger_backend.app.core.config import Settings
from ledger_backend.app.db.session import Database
from ledger_backend.app.domain.ledger.account_service import AccountService
from ledger_backend.app.domain.ledger.ledger_query import LedgerQueryService
from ledger_backend.app.domain.ledger.ledger_service import LedgerService
from ledger_backend.app.main import create_app
from ledger_backend.app.models.ledger_enums import AccountKind, BalanceSign

OPENING_DATE = date(2024, 1, 1)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
async def database(database_url):
    """Open handle with a fresh schema."""
    db = Database(database_url, busy_timeout=10.0).open()
    await db.create_schema()
    yield db
    await db.close()


@pytest.fixture
def accounts(database):
    return AccountService(database)


@pytest.fixture
def ledger(database):
    return LedgerService(database)


@pytest.fixture
def ledger_query(database):
    return LedgerQueryService(database)


@pytest.fixture
async def supplier(accounts):
    """Supplier we owe 500.00."""
    return await accounts.create_account(
        AccountKind.SUPPLIER,
        {"code": "SUP-001", "name": "Atlas Wholesale"},
        opening_balance="500",
        opening_sign=BalanceSign.CREDIT,
        opening_date=OPENING_DATE
    )


@pytest.fixture
async def client_account(accounts):
    """Client who owes us 1000.00."""
    return await accounts.create_account(
        AccountKind.CLIENT,
        {"code": "CLI-001", "name": "Boutique Amina", "phone": "0550 12 34 56"},
        opening_balance="1000",
        opening_sign=BalanceSign.DEBIT,
        opening_date=OPENING_DATE
    )


@pytest.fixture
async def app(database_url):
    """Application with its lifespan running against the test database."""
    application = create_app(Settings(database_url=database_url, default_currency="DZD"))
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app):
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
