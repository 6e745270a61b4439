"""
Unit tests for the request/response schemas.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from privfinos.schemas import (
    AccountCreate,
    AccountUpdate,
    Category,
    CategoryCreate,
    CategoryQuery,
    CategoryUpdate,
    IdParam,
    TransactionCreate,
    TransactionQuery,
)


class TestCategorySchemas:
    """Tests for category create/update/query validation."""

    def test_accepts_camel_case(self):
        data = CategoryCreate.model_validate({
            "name": "Rent",
            "type": "EXPENSE",
            "sortOrder": 4,
            "isActive": False,
        })
        assert data.sort_order == 4
        assert data.is_active is False

    @pytest.mark.parametrize("name", ["", "x" * 101])
    def test_name_length(self, name):
        with pytest.raises(ValidationError):
            CategoryCreate(name=name, type="EXPENSE")

    @pytest.mark.parametrize("color", ["red", "#fff", "#12345G", "123456"])
    def test_color_must_be_hex(self, color):
        with pytest.raises(ValidationError):
            CategoryCreate(name="Rent", type="EXPENSE", color=color)

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            CategoryCreate(name="Rent", type="SPENDING")

    def test_parent_id_must_be_uuid(self):
        with pytest.raises(ValidationError, match="Invalid UUID"):
            CategoryCreate(name="Rent", type="EXPENSE", parentId="not-a-uuid")

    def test_update_tracks_sent_fields(self):
        update = CategoryUpdate.model_validate({"parentId": None})
        assert update.model_dump(exclude_unset=True) == {"parent_id": None}

    def test_update_rejects_null_name(self):
        with pytest.raises(ValidationError):
            CategoryUpdate.model_validate({"name": None})

    @pytest.mark.parametrize("raw", ["null", ""])
    def test_query_null_parent_means_root(self, raw):
        query = CategoryQuery.model_validate({"parentId": raw})
        assert query.parent_id is None
        assert query.filters_parent is True

    def test_query_without_parent(self):
        query = CategoryQuery.model_validate({"isActive": "false"})
        assert query.is_active is False
        assert query.filters_parent is False

    def test_row_serializes_camel_case(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        row = Category(
            id="a", name="Rent", type="EXPENSE", parent_id=None,
            sort_order=1, is_active=True, created_at=now, updated_at=now,
        )
        payload = row.to_json()
        assert payload["sortOrder"] == 1
        assert payload["parentId"] is None
        assert "sort_order" not in payload


class TestAccountSchemas:
    """Tests for account validation."""

    def test_currency_length(self):
        with pytest.raises(ValidationError):
            AccountCreate(name="Checking", type="CHECKING", currency="US")

    def test_notes_length(self):
        with pytest.raises(ValidationError):
            AccountCreate(name="Checking", type="CHECKING", notes="x" * 501)

    def test_balance_range(self):
        with pytest.raises(ValidationError):
            AccountCreate(name="Checking", type="CHECKING", balance=Decimal("10000000000000"))

    def test_update_rejects_null_balance(self):
        with pytest.raises(ValidationError):
            AccountUpdate.model_validate({"balance": None})


class TestTransactionSchemas:
    """Tests for transaction validation."""

    def test_receipt_url_must_be_url(self):
        with pytest.raises(ValidationError):
            TransactionCreate(
                account_id="00000000-0000-4000-8000-000000000000",
                type="EXPENSE",
                amount=Decimal("1"),
                description="Lunch",
                date="2026-01-01T12:00:00Z",
                receipt_url="not a url",
            )

    def test_defaults(self):
        data = TransactionCreate(
            account_id="00000000-0000-4000-8000-000000000000",
            type="EXPENSE",
            amount=Decimal("1"),
            description="Lunch",
            date="2026-01-01T12:00:00Z",
        )
        assert data.tags == []
        assert data.is_reconciled is False

    @pytest.mark.parametrize("limit", ["0", "101"])
    def test_query_limit_bounds(self, limit):
        with pytest.raises(ValidationError):
            TransactionQuery.model_validate({"limit": limit})

    def test_query_defaults(self):
        query = TransactionQuery()
        assert query.limit == 50
        assert query.offset == 0


class TestIdParam:
    def test_uuid_is_normalized(self):
        param = IdParam.model_validate({"id": "0A2B3C4D-0000-4000-8000-000000000000"})
        assert param.id == "0a2b3c4d-0000-4000-8000-000000000000"

    def test_invalid_uuid(self):
        with pytest.raises(ValidationError):
            IdParam.model_validate({"id": "123"})
