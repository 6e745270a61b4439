"""
Shared plumbing for the table-backed services.

Each service owns one table and one row model. Subclasses set the class
attributes below and write their business rules on top of these helpers.
"""

from privfinos.db import new_id, to_datetime_str, to_db_value, utcnow
from privfinos.errors import NotFoundError


class BaseService:
    table = None
    model = None
    not_found_message = "Not found"
    not_found_code = None
    # Ordering shared by every list endpoint except transactions
    order_by = "sort_order ASC, created_at DESC"

    def __init__(self, db):
        self.db = db

    # =========================================================================
    # READ HELPERS
    # =========================================================================

    def _get(self, cursor, row_id):
        row = cursor.execute(f"SELECT * FROM {self.table} WHERE id = ?", (row_id,)).fetchone()
        if row is None:
            raise NotFoundError(self.not_found_message, self.not_found_code)
        return self.model.from_row(row)

    def _select(self, conditions, params, suffix=""):
        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"SELECT * FROM {self.table}{where} ORDER BY {self.order_by}{suffix}"
        with self.db.connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self.model.from_row(row) for row in rows]

    def get_by_id(self, row_id):
        with self.db.connection() as conn:
            return self._get(conn, row_id)

    # =========================================================================
    # WRITE HELPERS (callers hold a transaction cursor)
    # =========================================================================

    def _insert(self, cursor, values):
        """Insert one row with a fresh id and timestamps; returns the new id."""
        now = to_datetime_str(utcnow())
        row = {"id": new_id(), **values, "created_at": now, "updated_at": now}
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        cursor.execute(
            f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
            [to_db_value(value) for value in row.values()],
        )
        return row["id"]

    def _update(self, cursor, row_id, changes):
        """Apply the given column changes and bump updated_at."""
        changes = {**changes, "updated_at": utcnow()}
        assignments = ", ".join(f"{column} = ?" for column in changes)
        params = [to_db_value(value) for value in changes.values()]
        cursor.execute(f"UPDATE {self.table} SET {assignments} WHERE id = ?", params + [row_id])

    def _soft_delete(self, row_id):
        with self.db.transaction() as cursor:
            self._get(cursor, row_id)
            self._update(cursor, row_id, {"is_active": False})
            return self._get(cursor, row_id)

    def _hard_delete(self, row_id):
        with self.db.transaction() as cursor:
            self._get(cursor, row_id)
            cursor.execute(f"DELETE FROM {self.table} WHERE id = ?", (row_id,))
