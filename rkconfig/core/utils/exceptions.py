from __future__ import annotations

import sqlite3


def is_duplicate_column(exc: BaseException) -> bool:
    """Return True when *exc* is SQLite rejecting an ALTER for an existing column.

    SQLite reports this as a generic SQLITE_ERROR, so the error code alone
    cannot tell it apart from a syntax error; we require both.
    """

    if not isinstance(exc, sqlite3.OperationalError):
        return False

    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None and code != sqlite3.SQLITE_ERROR:
        return False

    try:
        msg = str(exc).lower()
    except Exception:
        return False

    return "duplicate column name" in msg


def is_permission_denied(exc: BaseException) -> bool:
    """Best-effort check for permission failures on the database file."""

    if isinstance(exc, PermissionError):
        return True

    errno = getattr(exc, "errno", None)
    if errno in (1, 13):
        # EPERM=1, EACCES=13
        return True

    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None and code in (sqlite3.SQLITE_READONLY, sqlite3.SQLITE_PERM, sqlite3.SQLITE_CANTOPEN):
        return True

    try:
        msg = str(exc).lower()
    except Exception:
        return False

    return "readonly database" in msg or "permission denied" in msg or "unable to open database" in msg


def is_device_disconnected(exc: BaseException) -> bool:
    """Best-effort check for a keyboard that disappeared mid-write."""

    errno = getattr(exc, "errno", None)
    if errno == 19:
        return True

    try:
        msg = str(exc)
    except Exception:
        return False

    return "No such device" in msg


def is_device_busy(exc: BaseException) -> bool:
    """Best-effort check for transient 'busy' errors."""

    errno = getattr(exc, "errno", None)
    if errno == 16:
        return True

    try:
        msg = str(exc)
    except Exception:
        return False

    return "Device or resource busy" in msg
