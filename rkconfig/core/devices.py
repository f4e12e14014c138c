"""Interfaces to the keyboard transport.

Scanning and the HID protocol live outside this package. The coordinator in
`rkconfig.core.sync` talks to them only through the protocols below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .store.models import DeviceIdentity, KeyboardConfig


@dataclass(frozen=True)
class KeyDescriptor:
    """One physical key: its buffer slot, default key code and on-image box."""

    buffer_index: int
    key_code: int
    top_x: int
    top_y: int
    bottom_x: int
    bottom_y: int


@dataclass(frozen=True)
class KeyboardDescriptor:
    """A connected keyboard as reported by a scan."""

    identity: DeviceIdentity
    path: str
    name: str
    image_path: str = ""
    keys: tuple[KeyDescriptor, ...] = ()
    key_map_enabled: bool = False
    light_enabled: bool = True
    rgb: bool = True


class KeyboardScanner(Protocol):
    """Lists keyboards currently attached to the system."""

    def scan_keyboards(self) -> list[KeyboardDescriptor]: ...


class ConfigSender(Protocol):
    """Pushes a configuration to one keyboard.

    Returns True on success. Transport errors may also be raised.
    """

    def send_keyboard_config(self, path: str, config: KeyboardConfig, keyboard: KeyboardDescriptor) -> bool: ...
