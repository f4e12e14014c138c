"""Single shared SQLite handle for the configuration store.

One connection, one worker thread. Statements are handed to the worker with
`await handle.run(fn)`, so callers on the event loop never block on disk I/O
and no two statements ever run on the connection at the same time.

The handle opens lazily on first use and stays open until `close()`. It is
constructed once by the application and passed to whatever needs it; there is
no module-level singleton.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, TypeVar

from ..config import StoreSettings
from .errors import StorageError, StorageIOError
from .schema import ensure_schema

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block of statements as one write transaction.

    The connection is in autocommit mode, so BEGIN/COMMIT are explicit.
    """

    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        # The block may already have ended the transaction itself.
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    else:
        conn.execute("COMMIT")


class StorageHandle:
    """Owns the store connection and the worker thread that uses it."""

    def __init__(self, settings: Optional[StoreSettings] = None) -> None:
        self.settings = settings if settings is not None else StoreSettings.from_env()
        self._conn: Optional[sqlite3.Connection] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def __aenter__(self) -> "StorageHandle":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> "StorageHandle":
        """Connect and ensure the schema. Idempotent; concurrent callers share one open."""

        if self._conn is not None:
            return self

        async with self._lock:
            if self._conn is not None:
                return self
            if self._closed:
                raise StorageIOError("Storage handle is closed")

            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rkconfig-db")
            cfut = executor.submit(self._connect)
            try:
                conn = await asyncio.wrap_future(cfut)
            except asyncio.CancelledError:
                # The worker keeps connecting; close whatever it ends up opening.
                cfut.add_done_callback(_close_abandoned)
                executor.shutdown(wait=False)
                raise
            except BaseException:
                executor.shutdown(wait=False)
                raise

            self._executor = executor
            self._conn = conn
        return self

    def _connect(self) -> sqlite3.Connection:
        s = self.settings
        try:
            if not s.in_memory:
                Path(s.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(s.db_path),
                timeout=s.busy_timeout_s,
                isolation_level=None,
                check_same_thread=False,
            )
        except (sqlite3.Error, OSError) as exc:
            raise StorageIOError(f"Failed to open store at {s.db_path}", cause=exc) from exc

        try:
            conn.row_factory = sqlite3.Row
            if not s.in_memory:
                conn.execute(f"PRAGMA journal_mode={s.journal_mode}")
            ensure_schema(conn)
        except StorageError:
            conn.close()
            raise
        except sqlite3.Error as exc:
            conn.close()
            raise StorageIOError(f"Failed to prepare store at {s.db_path}", cause=exc) from exc

        logger.info("Opened configuration store: %s", s.db_path)
        return conn

    async def close(self) -> None:
        """Close the connection after any queued statements finish.

        A closed handle cannot be reopened.
        """

        async with self._lock:
            self._closed = True
            conn, executor = self._conn, self._executor
            self._conn = None
            self._executor = None
            if conn is None or executor is None:
                return

            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(executor, conn.close)
            finally:
                executor.shutdown(wait=False)
            logger.info("Closed configuration store: %s", self.settings.db_path)

    async def run(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        """Execute fn(conn) on the worker thread and return its result.

        sqlite3 and OS errors are raised as StorageIOError; StorageError
        subclasses raised by *fn* pass through unchanged.
        """

        if self._conn is None:
            await self.open()

        conn, executor = self._conn, self._executor
        if conn is None or executor is None:
            raise StorageIOError("Storage handle is not open")

        loop = asyncio.get_running_loop()
        try:
            fut = loop.run_in_executor(executor, _call, conn, fn)
        except RuntimeError as exc:
            # Executor shut down by a concurrent close().
            raise StorageIOError("Storage handle was closed", cause=exc) from exc
        return await fut

    async def ensure_schema(self) -> None:
        """Re-run schema creation/evolution on the open store."""

        await self.run(ensure_schema)


def _close_abandoned(cfut: Future[sqlite3.Connection]) -> None:
    if cfut.cancelled() or cfut.exception() is not None:
        return
    cfut.result().close()
    logger.debug("Closed store connection from a cancelled open")


def _call(conn: sqlite3.Connection, fn: Callable[[sqlite3.Connection], T]) -> T:
    try:
        return fn(conn)
    except StorageError:
        raise
    except (sqlite3.Error, OSError) as exc:
        logger.debug("Storage statement failed: %s", exc)
        raise StorageIOError("Storage statement failed", cause=exc) from exc
