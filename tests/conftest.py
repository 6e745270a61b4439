"""
Pytest configuration and fixtures for PrivFinOS tests.

Every test gets its own in-memory database with the schema created.
"""

from decimal import Decimal

import pytest

from privfinos.api import create_app
from privfinos.config import Settings
from privfinos.db import Database
from privfinos.schema import create_database
from privfinos.schemas import AccountCreate, CategoryCreate
from privfinos.services import AccountsService, CategoriesService, TransactionsService


@pytest.fixture
def db():
    """Isolated in-memory database with the schema in place."""
    database = Database("sqlite:///:memory:").open()
    assert create_database(database)
    yield database
    database.close()


@pytest.fixture
def categories(db) -> CategoriesService:
    return CategoriesService(db)


@pytest.fixture
def accounts(db) -> AccountsService:
    return AccountsService(db)


@pytest.fixture
def transactions(db) -> TransactionsService:
    return TransactionsService(db)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        app_env="test",
        database_url="sqlite:///:memory:",
        cors_origin="http://localhost:5173",
        web_dist_path=tmp_path / "dist",
    )


@pytest.fixture
def app(settings, db):
    return create_app(settings, db)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def expense_category(categories):
    return categories.create(CategoryCreate(name="Groceries", type="EXPENSE"))


@pytest.fixture
def checking(accounts):
    return accounts.create(
        AccountCreate(name="Checking", type="CHECKING", balance=Decimal("5000.00"))
    )


@pytest.fixture
def savings(accounts):
    return accounts.create(
        AccountCreate(name="Savings", type="SAVINGS", balance=Decimal("10000.00"))
    )
