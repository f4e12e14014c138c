#!/usr/bin/env python3
"""Unit tests for pushing configs/profiles to keyboards (core/sync.py)."""

from __future__ import annotations

import errno
from dataclasses import dataclass, field

import pytest

from rkconfig.core.devices import KeyboardDescriptor
from rkconfig.core.store import DeviceIdentity, KeyboardConfig, LightModeConfig, ProfileDraft, StorageIOError
from rkconfig.core.sync import apply_config, apply_profile, restore_last_config, send_config


@dataclass
class FakeSender:
    ok: bool = True
    error: Exception | None = None
    sent: list = field(default_factory=list)

    def send_keyboard_config(self, path, config, keyboard):
        self.sent.append((path, config, keyboard))
        if self.error is not None:
            raise self.error
        return self.ok


CFG = KeyboardConfig(light_mode=LightModeConfig(mode_bit=16, animation=0, brightness=4, random_colors=False, sleep=0))


@pytest.fixture
def keyboard(identity):
    return KeyboardDescriptor(identity=identity, path="/dev/hidraw3", name="RK61")


async def test_send_config_reports_success(keyboard):
    sender = FakeSender()
    assert await send_config(sender, keyboard, CFG) is True
    assert sender.sent == [("/dev/hidraw3", CFG, keyboard)]


@pytest.mark.parametrize(
    "error",
    [
        OSError(errno.ENODEV, "No such device"),
        OSError(errno.EBUSY, "Device or resource busy"),
        PermissionError(errno.EACCES, "Permission denied"),
        OSError("write failed"),
    ],
)
async def test_send_config_transport_oserror_is_false(keyboard, error):
    assert await send_config(FakeSender(error=error), keyboard, CFG) is False


async def test_send_config_other_errors_propagate(keyboard):
    with pytest.raises(ValueError):
        await send_config(FakeSender(error=ValueError("bad buffer")), keyboard, CFG)


async def test_apply_config_persists_only_on_success(repo, keyboard):
    assert await apply_config(repo, FakeSender(ok=False), keyboard, CFG) is False
    assert await repo.get_device_config(keyboard.identity) is None

    assert await apply_config(repo, FakeSender(), keyboard, CFG) is True
    assert await repo.get_device_config(keyboard.identity) == CFG


async def test_apply_profile_sends_stores_and_selects(repo, keyboard):
    await repo.save_profile(ProfileDraft(id="p-1", name="Gaming", identity=keyboard.identity, config=CFG))
    sender = FakeSender()

    assert await apply_profile(repo, sender, keyboard, "p-1") is True
    assert [s[1] for s in sender.sent] == [CFG]
    assert await repo.get_device_config(keyboard.identity) == CFG
    assert await repo.get_selected_profile(keyboard.identity) == "p-1"


async def test_apply_profile_missing_profile(repo, keyboard):
    sender = FakeSender()
    assert await apply_profile(repo, sender, keyboard, "nope") is False
    assert sender.sent == []
    assert await repo.get_selected_profile(keyboard.identity) is None


async def test_apply_profile_for_other_device_is_refused(repo, keyboard):
    other = DeviceIdentity(0x05AC, 0x024F)
    await repo.save_profile(ProfileDraft(id="p-x", name="Other", identity=other, config=CFG))
    sender = FakeSender()

    assert await apply_profile(repo, sender, keyboard, "p-x") is False
    assert sender.sent == []


async def test_apply_profile_rejected_by_keyboard_keeps_old_selection(repo, keyboard):
    await repo.save_profile(ProfileDraft(id="p-1", name="Gaming", identity=keyboard.identity, config=CFG))
    await repo.set_selected_profile(keyboard.identity, "p-0")

    assert await apply_profile(repo, FakeSender(ok=False), keyboard, "p-1") is False
    assert await repo.get_selected_profile(keyboard.identity) == "p-0"


async def test_restore_last_config(repo, keyboard):
    sender = FakeSender()
    assert await restore_last_config(repo, sender, keyboard) is False

    await repo.set_selected_profile(keyboard.identity, "p-1")
    assert await restore_last_config(repo, sender, keyboard) is False
    assert sender.sent == []

    await repo.save_device_config(keyboard.identity, CFG)
    assert await restore_last_config(repo, sender, keyboard) is True
    assert [s[1] for s in sender.sent] == [CFG]


async def test_storage_errors_propagate(settings, keyboard):
    from rkconfig.core.store import ProfileRepository, StorageHandle

    handle = StorageHandle(settings)
    await handle.open()
    await handle.close()

    with pytest.raises(StorageIOError):
        await apply_profile(ProfileRepository(handle), FakeSender(), keyboard, "p-1")
