from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest


# Safety default: during pytest, never touch the user's real configurator store.
os.environ.setdefault("RKCONFIG_DATA_DIR", tempfile.mkdtemp(prefix="rkconfig-test-data-"))
os.environ.pop("RKCONFIG_DB_PATH", None)


class FakeClock:
    """Unix-seconds clock that advances by *step* on every call."""

    def __init__(self, start: int = 1_700_000_000, step: int = 1) -> None:
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "store" / "rk_configurator.db"


@pytest.fixture
def settings(db_path: Path):
    from rkconfig.core.config import StoreSettings

    return StoreSettings(db_path=db_path)


@pytest.fixture
async def handle(settings):
    from rkconfig.core.store import StorageHandle

    h = StorageHandle(settings)
    await h.open()
    try:
        yield h
    finally:
        await h.close()


@pytest.fixture
async def repo(handle, fake_clock):
    from rkconfig.core.store import ProfileRepository

    return ProfileRepository(handle, clock=fake_clock)


@pytest.fixture
def identity():
    from rkconfig.core.store import DeviceIdentity

    return DeviceIdentity(vendor_id=0x258A, product_id=0x00B5)
