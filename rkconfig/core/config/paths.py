"""Storage path helpers.

Kept separate from the settings object so tests can point the store at a temp
directory through environment variables alone.
"""

from __future__ import annotations

import os
from pathlib import Path


APP_DIR_NAME = "rk-configurator"
DB_FILE_NAME = "rk_configurator.db"


def data_dir() -> Path:
    """Return the directory holding the configurator database.

    Priority:
    - RKCONFIG_DATA_DIR
    - XDG_DATA_HOME/rk-configurator
    - ~/.local/share/rk-configurator
    """

    p = os.environ.get("RKCONFIG_DATA_DIR")
    if p:
        return Path(p)

    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME

    return Path.home() / ".local" / "share" / APP_DIR_NAME


def database_path() -> Path:
    """Return the SQLite database path.

    Priority:
    - RKCONFIG_DB_PATH (explicit file override)
    - data_dir()/rk_configurator.db
    """

    p = os.environ.get("RKCONFIG_DB_PATH")
    if p:
        return Path(p)
    return data_dir() / DB_FILE_NAME
