"""
Accounts Service

CRUD for financial accounts plus balance lookups. Balances are stored as
two-place decimal text; hard deleting an account cascades to its
transactions through the schema's foreign keys.
"""

from decimal import Decimal

from privfinos.db import from_money_str
from privfinos.schemas import Account, AccountBalance, DeleteResult, TotalBalance
from privfinos.services.base import BaseService

TOTAL_BALANCE_CURRENCY = "USD"


class AccountsService(BaseService):
    table = "accounts"
    model = Account
    not_found_message = "Account not found"
    not_found_code = "ACCOUNT_NOT_FOUND"

    def get_all(self, filters=None):
        conditions, params = [], []
        if filters is not None:
            if filters.type is not None:
                conditions.append("type = ?")
                params.append(filters.type)
            if filters.is_active is not None:
                conditions.append("is_active = ?")
                params.append(int(filters.is_active))

        return self._select(conditions, params)

    def get_balance(self, account_id):
        account = self.get_by_id(account_id)
        return AccountBalance(
            account_id=account.id,
            balance=float(account.balance),
            currency=account.currency,
        )

    def create(self, data):
        values = data.model_dump()
        with self.db.transaction() as cursor:
            account_id = self._insert(cursor, values)
            return self._get(cursor, account_id)

    def update(self, account_id, data):
        changes = data.model_dump(exclude_unset=True)
        with self.db.transaction() as cursor:
            self._get(cursor, account_id)
            self._update(cursor, account_id, changes)
            return self._get(cursor, account_id)

    def delete(self, account_id):
        return self._soft_delete(account_id)

    def hard_delete(self, account_id):
        """Permanently delete an account together with all of its transactions."""
        self._hard_delete(account_id)
        return DeleteResult(message="Account permanently deleted")

    def get_total_balance(self):
        """
        Sum the balances of all active accounts.

        Balances are added as-is regardless of each account's currency and the
        result is always labelled USD; there is no exchange-rate conversion.
        """
        with self.db.connection() as conn:
            rows = conn.execute("SELECT balance FROM accounts WHERE is_active = 1").fetchall()

        total = sum((from_money_str(row["balance"]) for row in rows), Decimal("0.00"))
        return TotalBalance(
            total=float(total),
            currency=TOTAL_BALANCE_CURRENCY,
            account_count=len(rows),
        )
