"""Configurator settings and storage paths.

`from rkconfig.core.config import StoreSettings` is the usual entry point.
"""

from __future__ import annotations

from .paths import data_dir, database_path
from .settings import StoreSettings


__all__ = [
    "StoreSettings",
    "data_dir",
    "database_path",
]
