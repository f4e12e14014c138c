from __future__ import annotations

import logging
from pathlib import Path

from rkconfig.core.config import StoreSettings, data_dir, database_path


def test_data_dir_prefers_explicit_override(monkeypatch, tmp_path):
    monkeypatch.setenv("RKCONFIG_DATA_DIR", str(tmp_path / "explicit"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    assert data_dir() == tmp_path / "explicit"


def test_data_dir_uses_xdg_data_home(monkeypatch, tmp_path):
    monkeypatch.delenv("RKCONFIG_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    assert data_dir() == tmp_path / "xdg" / "rk-configurator"


def test_data_dir_falls_back_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("RKCONFIG_DATA_DIR", raising=False)
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert data_dir() == Path(tmp_path) / ".local" / "share" / "rk-configurator"


def test_database_path(monkeypatch, tmp_path):
    monkeypatch.setenv("RKCONFIG_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("RKCONFIG_DB_PATH", raising=False)
    assert database_path() == tmp_path / "rk_configurator.db"

    monkeypatch.setenv("RKCONFIG_DB_PATH", str(tmp_path / "other.sqlite"))
    assert database_path() == tmp_path / "other.sqlite"


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("RKCONFIG_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("RKCONFIG_BUSY_TIMEOUT", "1.5")
    monkeypatch.setenv("RKCONFIG_JOURNAL_MODE", "delete")

    s = StoreSettings.from_env()
    assert s.db_path == tmp_path / "x.db"
    assert s.busy_timeout_s == 1.5
    assert s.journal_mode == "DELETE"
    assert not s.in_memory


def test_settings_from_env_ignores_malformed_values(monkeypatch, caplog):
    monkeypatch.setenv("RKCONFIG_BUSY_TIMEOUT", "soon")
    monkeypatch.setenv("RKCONFIG_JOURNAL_MODE", "bogus; DROP TABLE profiles")

    with caplog.at_level(logging.DEBUG, logger="rkconfig.core.config.settings"):
        s = StoreSettings.from_env()

    assert s.busy_timeout_s == 5.0
    assert s.journal_mode == "WAL"
    assert len(caplog.records) == 2


def test_negative_timeout_is_clamped(monkeypatch):
    monkeypatch.setenv("RKCONFIG_BUSY_TIMEOUT", "-3")
    assert StoreSettings.from_env().busy_timeout_s == 0.0


def test_in_memory_flag():
    assert StoreSettings(db_path=":memory:").in_memory
