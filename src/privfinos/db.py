"""
PrivFinOS - Database Handle

A Database is built once at process start from DATABASE_URL, opened, handed to
every service, and closed on shutdown. Each unit of work gets its own SQLite
connection; multi-statement operations go through transaction(), which holds a
write lock (BEGIN IMMEDIATE) from the first read to the commit.

In-memory databases use a named shared-cache URI so every connection of the
same Database sees the same data. An anchor connection keeps it alive until
close().

License: MIT
"""

import datetime
import json
import sqlite3
import uuid
from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path

MEMORY = ":memory:"
MONEY_QUANTUM = Decimal("0.01")


def parse_database_url(url):
    """
    Turn DATABASE_URL into a filesystem path or ":memory:".

    Accepted forms:
        sqlite:///data/privfinos.db     relative path
        sqlite:////var/lib/privfinos.db absolute path
        sqlite:///:memory:              in-memory database
        data/privfinos.db               bare path
    """
    if url.startswith("sqlite:///"):
        url = url[len("sqlite:///"):]
    elif url.startswith("sqlite://"):
        raise ValueError(f"Unsupported database URL: {url!r} (expected sqlite:///<path>)")
    elif "://" in url:
        raise ValueError(f"Unsupported database URL: {url!r} (only sqlite is supported)")

    if not url:
        raise ValueError("Database URL does not name a database file")
    return url


# =============================================================================
# VALUE CONVERSION HELPERS
# =============================================================================

def to_money_str(value):
    """Convert a number to fixed two-place decimal text for storage."""
    if value is None:
        return None
    return str(Decimal(str(value)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP))


def from_money_str(value):
    """Convert stored money text back to a Decimal."""
    if value is None or value == "":
        return Decimal("0.00")
    return Decimal(str(value))


def to_bool_int(value):
    return 1 if value else 0


def to_datetime_str(dt):
    """Timezone-aware datetimes are stored as UTC ISO-8601 text."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc).isoformat(timespec="microseconds")


def to_db_value(value):
    """Convert a validated Python value to its SQLite storage form."""
    if isinstance(value, bool):
        return to_bool_int(value)
    if isinstance(value, Decimal):
        return to_money_str(value)
    if isinstance(value, datetime.datetime):
        return to_datetime_str(value)
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    if isinstance(value, Enum):
        return value.value
    return value


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def new_id():
    return str(uuid.uuid4())


class Database:
    """
    Explicitly constructed data-access handle.

    Example:
        db = Database("sqlite:///data/privfinos.db")
        db.open()
        try:
            with db.transaction() as cursor:
                cursor.execute("SELECT COUNT(*) FROM accounts")
        finally:
            db.close()
    """

    def __init__(self, url):
        self.url = url
        target = parse_database_url(url)
        self.is_memory = target == MEMORY
        self.path = None if self.is_memory else Path(target)
        self._memory_uri = f"file:privfinos-{uuid.uuid4().hex}?mode=memory&cache=shared"
        self._anchor = None
        self._opened = False

    def __repr__(self):
        return f"Database({self.url!r})"

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self._opened:
            return self
        if self.is_memory:
            self._anchor = self._connect()
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._opened = True
        return self

    def close(self):
        if self._anchor is not None:
            self._anchor.close()
            self._anchor = None
        self._opened = False

    def exists(self):
        """True when the database file is already on disk (always True in memory)."""
        return self.is_memory or self.path.exists()

    def _connect(self):
        if self.is_memory:
            conn = sqlite3.connect(
                self._memory_uri, uri=True, isolation_level=None, check_same_thread=False
            )
        else:
            conn = sqlite3.connect(str(self.path), isolation_level=None)

        # Foreign keys are off by default in SQLite and enforce every ON DELETE action
        conn.execute("PRAGMA foreign_keys = ON;")
        # Unicode-aware case folding for text search (LIKE only folds ASCII)
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def connection(self):
        """Yield a fresh autocommit connection; closed on exit."""
        if not self._opened:
            raise RuntimeError(f"{self!r} is not open")
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self):
        """
        Yield a cursor inside BEGIN IMMEDIATE ... COMMIT.

        Any exception rolls the whole unit of work back and is re-raised.
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                yield cursor
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()
            finally:
                cursor.close()
