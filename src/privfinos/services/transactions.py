"""
Transactions Service

Income, expense and transfer records. Every transaction belongs to one
account and may be tagged with one category; transfers also name the
destination account. Creating or editing a transaction does not touch the
stored account balances.
"""

from privfinos.db import to_datetime_str
from privfinos.errors import BadRequestError, NotFoundError
from privfinos.schemas import DeleteResult, Transaction, TransactionType
from privfinos.services.base import BaseService

TRANSFER_FIELDS = frozenset({"type", "account_id", "to_account_id"})


class TransactionsService(BaseService):
    table = "transactions"
    model = Transaction
    not_found_message = "Transaction not found"
    not_found_code = "TRANSACTION_NOT_FOUND"
    order_by = "date DESC, created_at DESC"

    def get_all(self, query=None):
        """
        List transactions, newest first.

        Args:
            query (TransactionQuery): Optional filters (account, category,
                type, date range, amount range, description search) plus
                limit/offset paging. Without a query the first 50 are returned.
        """
        conditions, params = [], []
        limit, offset = 50, 0

        if query is not None:
            limit, offset = query.limit, query.offset
            if query.account_id:
                conditions.append("account_id = ?")
                params.append(query.account_id)
            if query.category_id:
                conditions.append("category_id = ?")
                params.append(query.category_id)
            if query.type is not None:
                conditions.append("type = ?")
                params.append(query.type)
            if query.start_date is not None:
                conditions.append("date >= ?")
                params.append(to_datetime_str(query.start_date))
            if query.end_date is not None:
                conditions.append("date <= ?")
                params.append(to_datetime_str(query.end_date))
            if query.min_amount is not None:
                conditions.append("CAST(amount AS REAL) >= ?")
                params.append(float(query.min_amount))
            if query.max_amount is not None:
                conditions.append("CAST(amount AS REAL) <= ?")
                params.append(float(query.max_amount))
            if query.search and query.search.strip():
                # casefold() is registered on every connection by Database
                conditions.append("instr(casefold(description), ?) > 0")
                params.append(query.search.strip().casefold())

        return self._select(conditions, params + [limit, offset], suffix=" LIMIT ? OFFSET ?")

    def create(self, data):
        values = data.model_dump()
        with self.db.transaction() as cursor:
            self._check_references(cursor, values)
            _check_transfer(values)
            transaction_id = self._insert(cursor, values)
            return self._get(cursor, transaction_id)

    def update(self, transaction_id, data):
        changes = data.model_dump(exclude_unset=True)
        with self.db.transaction() as cursor:
            current = self._get(cursor, transaction_id)
            self._check_references(cursor, changes)
            # to_account_id may have been nulled by an account delete; only
            # re-check the transfer rule when a transfer field changes
            if TRANSFER_FIELDS & changes.keys():
                _check_transfer({**current.model_dump(), **changes})
            self._update(cursor, transaction_id, changes)
            return self._get(cursor, transaction_id)

    def delete(self, transaction_id):
        """Transactions have no active flag; delete removes the row."""
        self._hard_delete(transaction_id)
        return DeleteResult(message="Transaction deleted")

    def _check_references(self, cursor, values):
        """Every referenced account/category must exist."""
        if values.get("account_id"):
            _require(cursor, "accounts", values["account_id"], "Account not found", "ACCOUNT_NOT_FOUND")
        if values.get("to_account_id"):
            _require(cursor, "accounts", values["to_account_id"], "Destination account not found", "ACCOUNT_NOT_FOUND")
        if values.get("category_id"):
            _require(cursor, "categories", values["category_id"], "Category not found", "CATEGORY_NOT_FOUND")


def _require(cursor, table, row_id, message, code):
    if cursor.execute(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,)).fetchone() is None:
        raise NotFoundError(message, code)


def _check_transfer(values):
    if values.get("type") != TransactionType.TRANSFER.value:
        return
    if not values.get("to_account_id"):
        raise BadRequestError("Transfers require a destination account.", "INVALID_TRANSFER")
    if values["to_account_id"] == values.get("account_id"):
        raise BadRequestError("Cannot transfer to the same account.", "INVALID_TRANSFER")
