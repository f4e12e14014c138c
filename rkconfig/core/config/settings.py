"""Store settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .paths import database_path

logger = logging.getLogger(__name__)


DEFAULT_BUSY_TIMEOUT_S = 5.0
DEFAULT_JOURNAL_MODE = "WAL"

# SQLite accepts these for PRAGMA journal_mode.
_JOURNAL_MODES = frozenset({"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"})


def _env_float(name: str, default: float, *, min_v: float = 0.0) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        v = float(raw)
    except ValueError:
        logger.debug("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default
    return max(min_v, v)


def _env_journal_mode(name: str, default: str) -> str:
    raw = (os.environ.get(name) or "").strip().upper()
    if not raw:
        return default
    if raw not in _JOURNAL_MODES:
        logger.debug("Ignoring unknown %s=%r; using %s", name, raw, default)
        return default
    return raw


@dataclass(frozen=True)
class StoreSettings:
    """Settings for opening the configuration store.

    `db_path` may be ":memory:" for throwaway stores.
    """

    db_path: Path | str = field(default_factory=database_path)
    busy_timeout_s: float = DEFAULT_BUSY_TIMEOUT_S
    journal_mode: str = DEFAULT_JOURNAL_MODE

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == ":memory:"

    @classmethod
    def from_env(cls) -> "StoreSettings":
        # Recompute at call time so test harnesses can set env vars in conftest.
        return cls(
            db_path=database_path(),
            busy_timeout_s=_env_float("RKCONFIG_BUSY_TIMEOUT", DEFAULT_BUSY_TIMEOUT_S),
            journal_mode=_env_journal_mode("RKCONFIG_JOURNAL_MODE", DEFAULT_JOURNAL_MODE),
        )
