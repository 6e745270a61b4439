"""
PrivFinOS - SQLite Schema Setup

Creates the PrivFinOS schema with its foreign key relationships and indexes.

Database Schema Overview:
------------------------
- categories: Income/expense categories, optionally nested under a parent
- accounts: Financial accounts (checking, savings, credit cards, loans, etc.)
- transactions: Income, expenses and transfers, owned by one account
- schema_version: Track applied database migrations

Key Design Features:
- CHECK constraints stand in for the enumerated types
- ON DELETE CASCADE removes an account's transactions with it
- ON DELETE SET NULL clears category/parent/transfer references
- TEXT storage for monetary values (preserves exact precision)

License: MIT
"""

import sqlite3

from privfinos.logger import get_logger

log = get_logger(__name__)

CATEGORY_TYPES = ("INCOME", "EXPENSE")
ACCOUNT_TYPES = ("CHECKING", "SAVINGS", "CREDIT_CARD", "INVESTMENT", "CASH", "LOAN", "OTHER")
TRANSACTION_TYPES = ("INCOME", "EXPENSE", "TRANSFER")


def _check_in(column, values):
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"CHECK({column} IN ({quoted}))"


# =============================================================================
# TABLE DEFINITIONS (creation order respects foreign keys)
# =============================================================================

TABLES = {}

TABLES["categories"] = f"""
    CREATE TABLE IF NOT EXISTS categories (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL CHECK(length(name) BETWEEN 1 AND 100),
        type TEXT {_check_in('type', CATEGORY_TYPES)} NOT NULL,
        color TEXT DEFAULT NULL,
        icon TEXT DEFAULT NULL,
        parent_id TEXT DEFAULT NULL,
        sort_order INTEGER NOT NULL DEFAULT 0,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (parent_id) REFERENCES categories(id) ON DELETE SET NULL
    )
"""

TABLES["accounts"] = f"""
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL CHECK(length(name) BETWEEN 1 AND 100),
        type TEXT {_check_in('type', ACCOUNT_TYPES)} NOT NULL,
        balance TEXT NOT NULL DEFAULT '0.00',
        currency TEXT NOT NULL DEFAULT 'CAD' CHECK(length(currency) = 3),
        color TEXT DEFAULT NULL,
        icon TEXT DEFAULT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        notes TEXT DEFAULT NULL,
        sort_order INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""

TABLES["transactions"] = f"""
    CREATE TABLE IF NOT EXISTS transactions (
        id TEXT PRIMARY KEY,
        account_id TEXT NOT NULL,
        category_id TEXT DEFAULT NULL,
        type TEXT {_check_in('type', TRANSACTION_TYPES)} NOT NULL,
        amount TEXT NOT NULL,
        description TEXT NOT NULL CHECK(length(description) BETWEEN 1 AND 200),
        notes TEXT DEFAULT NULL,
        date TEXT NOT NULL,
        to_account_id TEXT DEFAULT NULL,
        tags TEXT NOT NULL DEFAULT '[]',
        receipt_url TEXT DEFAULT NULL,
        is_reconciled INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (account_id) REFERENCES accounts(id) ON DELETE CASCADE,
        FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL,
        FOREIGN KEY (to_account_id) REFERENCES accounts(id) ON DELETE SET NULL
    )
"""

TABLES["schema_version"] = """
    CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        description TEXT NOT NULL,
        applied_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
"""

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_categories_parent_id ON categories(parent_id);",
    "CREATE INDEX IF NOT EXISTS idx_categories_order ON categories(sort_order, created_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_accounts_is_active ON accounts(is_active);",
    "CREATE INDEX IF NOT EXISTS idx_transactions_account_id ON transactions(account_id);",
    "CREATE INDEX IF NOT EXISTS idx_transactions_category_id ON transactions(category_id);",
    "CREATE INDEX IF NOT EXISTS idx_transactions_to_account_id ON transactions(to_account_id);",
]

EXPECTED_TABLES = list(TABLES)


def create_database(db):
    """
    Create every table and index that does not exist yet.

    Existing tables are left alone; use reset_database() to start fresh.

    Returns:
        bool: True if the schema is in place, False if creation failed
    """
    try:
        with db.transaction() as cursor:
            for name, ddl in TABLES.items():
                cursor.execute(ddl)
                log.debug("table_ready", table=name)
            for ddl in INDEXES:
                cursor.execute(ddl)
    except sqlite3.Error as err:
        log.error("schema_create_failed", database=db.url, error=str(err))
        return False

    log.info("schema_ready", database=db.url)
    return True


def reset_database(db):
    """
    [WARNING] Drop every PrivFinOS table and create the schema again.
    All data will be permanently lost!
    """
    with db.transaction() as cursor:
        for name in reversed(EXPECTED_TABLES):
            cursor.execute(f"DROP TABLE IF EXISTS {name}")
    log.warning("schema_dropped", database=db.url)
    return create_database(db)


def verify_schema(db):
    """Verify that all tables exist and foreign keys are enforced."""
    with db.connection() as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        present = {row["name"] for row in rows}
        missing = [table for table in EXPECTED_TABLES if table not in present]
        if missing:
            log.error("schema_tables_missing", tables=missing)
            return False

        fk_enabled = conn.execute("PRAGMA foreign_keys;").fetchone()[0]
        if not fk_enabled:
            log.error("foreign_keys_disabled")
            return False

    return True


def get_table_info(db, table_name):
    """
    Describe the columns of one PrivFinOS table.

    Returns:
        list: One dict per column with name, type, not_null, default, primary_key
    """
    if table_name not in EXPECTED_TABLES:
        raise ValueError(f"Unknown table: {table_name}")

    with db.connection() as conn:
        columns = conn.execute(f"PRAGMA table_info({table_name});").fetchall()

    return [
        {
            "name": col["name"],
            "type": col["type"],
            "not_null": bool(col["notnull"]),
            "default": col["dflt_value"],
            "primary_key": bool(col["pk"]),
        }
        for col in columns
    ]
