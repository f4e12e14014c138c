"""Device configuration and profile repository.

Two tables back this module:

- `device_config`: one row per device identity holding the last-applied
  config and the id of the selected profile.
- `profiles`: named config snapshots, many per device identity.

Each method runs as a single unit on the handle's worker thread. Methods that
read before they write (`save_device_config`, `save_profile`,
`set_selected_profile`) do so inside one transaction, so two calls for the
same device can never interleave their read and write steps.

The selected profile id is an advisory pointer. Deleting a profile leaves any
selection that names it in place; callers resolve dangling ids when showing
selection state.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Optional

from .database import StorageHandle, transaction
from .errors import SerializationError
from .models import DeviceConfigRecord, DeviceIdentity, KeyboardConfig, ProfileDraft, ProfileRecord
from .serialization import dumps_config, loads_config

logger = logging.getLogger(__name__)


Clock = Callable[[], int]

EMPTY_CONFIG_JSON = "{}"


def unix_now() -> int:
    return int(time.time())


def _require_identity(identity: object) -> DeviceIdentity:
    if not isinstance(identity, DeviceIdentity):
        raise TypeError(f"expected DeviceIdentity, got {type(identity).__name__}")
    return identity


@contextmanager
def _decoding(what: str) -> Iterator[None]:
    """Report bad column values in a stored row as SerializationError."""

    try:
        yield
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"stored {what} row has invalid values", cause=exc) from exc


def _row_to_profile(row: sqlite3.Row) -> ProfileRecord:
    with _decoding("profile"):
        return ProfileRecord(
            id=row["id"],
            name=row["name"],
            identity=DeviceIdentity(int(row["vendor_id"]), int(row["product_id"])),
            config=loads_config(row["config_json"]),
            created_at=int(row["created_at"]),
            updated_at=int(row["updated_at"]),
        )


_PROFILE_COLUMNS = "id, name, vendor_id, product_id, config_json, created_at, updated_at"

# config_json is read as bytes so invalid UTF-8 surfaces from loads_config.
_PROFILE_SELECT = "id, name, vendor_id, product_id, CAST(config_json AS BLOB) AS config_json, created_at, updated_at"


class ProfileRepository:
    """Async persistence for device configs and profiles."""

    def __init__(self, handle: StorageHandle, *, clock: Optional[Clock] = None) -> None:
        self._handle = handle
        self._clock: Clock = clock if clock is not None else unix_now

    @property
    def handle(self) -> StorageHandle:
        return self._handle

    # -- device_config -----------------------------------------------------

    async def save_device_config(self, identity: DeviceIdentity, config: KeyboardConfig) -> None:
        """Store *config* as the current config for *identity*.

        An existing selected profile id is carried over unchanged.
        """

        identity = _require_identity(identity)
        config_json = dumps_config(config)

        def _op(conn: sqlite3.Connection) -> None:
            with transaction(conn):
                row = conn.execute(
                    "SELECT selected_profile_id FROM device_config WHERE vendor_id = ? AND product_id = ?",
                    (identity.vendor_id, identity.product_id),
                ).fetchone()
                selected = (row["selected_profile_id"] or None) if row is not None else None
                conn.execute(
                    """
                    INSERT OR REPLACE INTO device_config
                        (vendor_id, product_id, config_json, selected_profile_id, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (identity.vendor_id, identity.product_id, config_json, selected, self._clock()),
                )

        await self._handle.run(_op)
        logger.debug("Saved device config for %s", identity)

    async def get_device_config_record(self, identity: DeviceIdentity) -> Optional[DeviceConfigRecord]:
        identity = _require_identity(identity)

        def _op(conn: sqlite3.Connection) -> Optional[DeviceConfigRecord]:
            row = conn.execute(
                """
                SELECT CAST(config_json AS BLOB) AS config_json, selected_profile_id, updated_at
                FROM device_config
                WHERE vendor_id = ? AND product_id = ?
                """,
                (identity.vendor_id, identity.product_id),
            ).fetchone()
            if row is None:
                return None
            with _decoding("device_config"):
                return DeviceConfigRecord(
                    identity=identity,
                    config=loads_config(row["config_json"]),
                    selected_profile_id=row["selected_profile_id"] or None,
                    updated_at=int(row["updated_at"]),
                )

        return await self._handle.run(_op)

    async def get_device_config(self, identity: DeviceIdentity) -> Optional[KeyboardConfig]:
        """Return the stored config for *identity*, or None if nothing was saved.

        A stored config that cannot be decoded raises SerializationError.
        """

        record = await self.get_device_config_record(identity)
        if record is None:
            return None
        return record.config

    async def list_devices(self) -> list[DeviceIdentity]:
        """Identities that have a device_config row, most recently updated first."""

        def _op(conn: sqlite3.Connection) -> list[DeviceIdentity]:
            rows = conn.execute(
                "SELECT vendor_id, product_id FROM device_config ORDER BY updated_at DESC, rowid DESC"
            ).fetchall()
            with _decoding("device_config"):
                return [DeviceIdentity(int(r["vendor_id"]), int(r["product_id"])) for r in rows]

        return await self._handle.run(_op)

    # -- selection ---------------------------------------------------------

    async def set_selected_profile(self, identity: DeviceIdentity, profile_id: Optional[str]) -> None:
        """Point *identity* at *profile_id* (None or "" clears the selection).

        Creates an empty device_config row if the device has none yet. An
        existing row keeps its config and updated_at.
        """

        identity = _require_identity(identity)
        if profile_id is not None and not isinstance(profile_id, str):
            raise TypeError("profile_id must be a string or None")
        selected = profile_id or None

        def _op(conn: sqlite3.Connection) -> None:
            with transaction(conn):
                row = conn.execute(
                    "SELECT 1 FROM device_config WHERE vendor_id = ? AND product_id = ?",
                    (identity.vendor_id, identity.product_id),
                ).fetchone()
                if row is not None:
                    conn.execute(
                        "UPDATE device_config SET selected_profile_id = ? WHERE vendor_id = ? AND product_id = ?",
                        (selected, identity.vendor_id, identity.product_id),
                    )
                else:
                    conn.execute(
                        """
                        INSERT INTO device_config
                            (vendor_id, product_id, config_json, selected_profile_id, updated_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (identity.vendor_id, identity.product_id, EMPTY_CONFIG_JSON, selected, self._clock()),
                    )

        await self._handle.run(_op)
        logger.debug("Selected profile %r for %s", selected, identity)

    async def get_selected_profile(self, identity: DeviceIdentity) -> Optional[str]:
        identity = _require_identity(identity)

        def _op(conn: sqlite3.Connection) -> Optional[str]:
            row = conn.execute(
                "SELECT selected_profile_id FROM device_config WHERE vendor_id = ? AND product_id = ?",
                (identity.vendor_id, identity.product_id),
            ).fetchone()
            if row is None:
                return None
            return row["selected_profile_id"] or None

        return await self._handle.run(_op)

    # -- profiles ----------------------------------------------------------

    async def list_profiles(self, identity: DeviceIdentity) -> list[ProfileRecord]:
        """Profiles for *identity*, most recently saved first."""

        identity = _require_identity(identity)

        def _op(conn: sqlite3.Connection) -> list[ProfileRecord]:
            # rowid breaks ties within one second: INSERT OR REPLACE gives a
            # re-saved profile a new, larger rowid.
            rows = conn.execute(
                f"""
                SELECT {_PROFILE_SELECT}
                FROM profiles
                WHERE vendor_id = ? AND product_id = ?
                ORDER BY updated_at DESC, rowid DESC
                """,
                (identity.vendor_id, identity.product_id),
            ).fetchall()
            return [_row_to_profile(row) for row in rows]

        return await self._handle.run(_op)

    async def get_profile(self, profile_id: str) -> Optional[ProfileRecord]:
        def _op(conn: sqlite3.Connection) -> Optional[ProfileRecord]:
            row = conn.execute(
                f"SELECT {_PROFILE_SELECT} FROM profiles WHERE id = ?",
                (profile_id,),
            ).fetchone()
            return _row_to_profile(row) if row is not None else None

        return await self._handle.run(_op)

    async def save_profile(self, profile: ProfileDraft) -> ProfileRecord:
        """Insert or replace a profile by id and return the stored record.

        created_at is kept from an existing row with the same id; updated_at
        is always refreshed.
        """

        if not isinstance(profile, ProfileDraft):
            raise TypeError(f"expected ProfileDraft, got {type(profile).__name__}")
        config_json = dumps_config(profile.config)
        identity = profile.identity

        def _op(conn: sqlite3.Connection) -> ProfileRecord:
            with transaction(conn):
                row = conn.execute("SELECT created_at FROM profiles WHERE id = ?", (profile.id,)).fetchone()
                now = self._clock()
                created_at = int(row["created_at"]) if row is not None else now
                conn.execute(
                    f"""
                    INSERT OR REPLACE INTO profiles ({_PROFILE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        profile.id,
                        profile.name,
                        identity.vendor_id,
                        identity.product_id,
                        config_json,
                        created_at,
                        now,
                    ),
                )
            return ProfileRecord(
                id=profile.id,
                name=profile.name,
                identity=identity,
                config=profile.config,
                created_at=created_at,
                updated_at=now,
            )

        record = await self._handle.run(_op)
        logger.debug("Saved profile %r (%s) for %s", record.name, record.id, identity)
        return record

    async def delete_profile(self, profile_id: str) -> bool:
        """Delete a profile by id. Returns False if there was nothing to delete.

        Selections pointing at the profile are left as they are.
        """

        def _op(conn: sqlite3.Connection) -> bool:
            cur = conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
            return cur.rowcount > 0

        deleted = await self._handle.run(_op)
        if deleted:
            logger.debug("Deleted profile %s", profile_id)
        return deleted
