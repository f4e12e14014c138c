"""Schema creation and additive evolution for the configuration store.

Every statement here is re-runnable: tables and indexes use IF NOT EXISTS, and
columns added after the first release are added only when missing. Only
column additions are supported; there is no version table and no way to drop
or retype a column.
"""

from __future__ import annotations

import logging
import sqlite3

from ..logging_utils import log_throttled
from ..utils.exceptions import is_duplicate_column, is_permission_denied
from .errors import SchemaError

logger = logging.getLogger(__name__)


PROFILES_TABLE = "profiles"
DEVICE_CONFIG_TABLE = "device_config"

_CREATE_PROFILES = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    vendor_id INTEGER NOT NULL,
    product_id INTEGER NOT NULL,
    config_json TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
)
"""

_CREATE_DEVICE_CONFIG = """
CREATE TABLE IF NOT EXISTS device_config (
    vendor_id INTEGER NOT NULL,
    product_id INTEGER NOT NULL,
    config_json TEXT NOT NULL,
    selected_profile_id TEXT,
    updated_at INTEGER NOT NULL,
    PRIMARY KEY (vendor_id, product_id)
)
"""

# (table, column, declaration) in the order they shipped.
ADDED_COLUMNS: tuple[tuple[str, str, str], ...] = (
    (DEVICE_CONFIG_TABLE, "selected_profile_id", "TEXT"),
)

_CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_profiles_device ON profiles(vendor_id, product_id)",
    "CREATE INDEX IF NOT EXISTS idx_profiles_updated ON profiles(updated_at)",
)


def table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    """Return the column names of *table* in declaration order ([] if absent)."""

    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return [row[1] for row in rows]


def _run_ddl(conn: sqlite3.Connection, sql: str, *, what: str) -> None:
    try:
        conn.execute(sql)
    except sqlite3.Error as exc:
        hint = " (permission denied)" if is_permission_denied(exc) else ""
        raise SchemaError(f"Failed to {what}{hint}", cause=exc) from exc


def ensure_column(conn: sqlite3.Connection, table: str, column: str, decl: str) -> bool:
    """Add *column* to *table* unless it is already there.

    Returns True if the column was added by this call.
    """

    try:
        existing = table_columns(conn, table)
    except sqlite3.Error as exc:
        raise SchemaError(f"Failed to inspect {table}", cause=exc) from exc

    if column in existing:
        return False

    try:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
    except sqlite3.Error as exc:
        if not is_duplicate_column(exc):
            raise SchemaError(f"Failed to add {table}.{column}", cause=exc) from exc
        # Someone else added it between the check and the ALTER.
        log_throttled(
            logger,
            f"schema.duplicate_column.{table}.{column}",
            interval_s=60,
            level=logging.DEBUG,
            msg=f"Column {table}.{column} already exists; skipping",
            exc=exc,
        )
        return False

    logger.info("Applying migration: added %s.%s", table, column)
    return True


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create or evolve the store schema in place.

    Safe to call on every start. Raises SchemaError on any DDL failure other
    than a column that already exists.
    """

    _run_ddl(conn, _CREATE_PROFILES, what="create profiles table")
    _run_ddl(conn, _CREATE_DEVICE_CONFIG, what="create device_config table")

    for table, column, decl in ADDED_COLUMNS:
        ensure_column(conn, table, column, decl)

    for sql in _CREATE_INDEXES:
        _run_ddl(conn, sql, what="create profile index")
