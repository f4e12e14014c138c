"""Value types for the configuration store.

All types are frozen dataclasses; sequences are tuples so a config read back
from the store compares equal to the one that was saved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


UINT8_MAX = 0xFF
UINT16_MAX = 0xFFFF


def _check_uint(name: str, value: object, max_v: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > max_v:
        raise ValueError(f"{name} out of range 0..{max_v}: {value}")


def _check_bool(name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be a bool, got {type(value).__name__}")


@dataclass(frozen=True, order=True)
class DeviceIdentity:
    """USB vendor/product pair naming a keyboard model.

    Two identical keyboards share one identity.
    """

    vendor_id: int
    product_id: int

    def __post_init__(self) -> None:
        _check_uint("vendor_id", self.vendor_id, UINT16_MAX)
        _check_uint("product_id", self.product_id, UINT16_MAX)

    def __str__(self) -> str:
        return f"0x{self.vendor_id:04x}:0x{self.product_id:04x}"

    @classmethod
    def parse(cls, text: str) -> "DeviceIdentity":
        """Parse "258a:00b5" or "0x258a:0x00b5" (hex)."""

        try:
            vid_s, pid_s = str(text).strip().split(":", 1)
            return cls(int(vid_s, 16), int(pid_s, 16))
        except ValueError as exc:
            raise ValueError(f"invalid device identity: {text!r}") from exc


@dataclass(frozen=True)
class RgbColor:
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        _check_uint("r", self.r, UINT8_MAX)
        _check_uint("g", self.g, UINT8_MAX)
        _check_uint("b", self.b, UINT8_MAX)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class PerKeyColor:
    index: int
    color: RgbColor

    def __post_init__(self) -> None:
        _check_uint("index", self.index, UINT16_MAX)
        if not isinstance(self.color, RgbColor):
            raise TypeError("color must be an RgbColor")


@dataclass(frozen=True)
class LightModeConfig:
    mode_bit: int
    animation: int
    brightness: int
    random_colors: bool = False
    sleep: int = 0
    color: Optional[RgbColor] = None
    custom_colors: Optional[tuple[PerKeyColor, ...]] = None

    def __post_init__(self) -> None:
        _check_uint("mode_bit", self.mode_bit, UINT8_MAX)
        _check_uint("animation", self.animation, UINT8_MAX)
        _check_uint("brightness", self.brightness, UINT8_MAX)
        _check_uint("sleep", self.sleep, UINT8_MAX)
        _check_bool("random_colors", self.random_colors)
        if self.color is not None and not isinstance(self.color, RgbColor):
            raise TypeError("color must be an RgbColor or None")
        if self.custom_colors is not None:
            # Accept any iterable from callers; store a tuple.
            object.__setattr__(self, "custom_colors", tuple(self.custom_colors))
            for entry in self.custom_colors:
                if not isinstance(entry, PerKeyColor):
                    raise TypeError("custom_colors entries must be PerKeyColor")


@dataclass(frozen=True)
class KeyMapping:
    index: int
    key_code: int

    def __post_init__(self) -> None:
        _check_uint("index", self.index, UINT16_MAX)
        _check_uint("key_code", self.key_code, UINT16_MAX)


@dataclass(frozen=True)
class KeyMappingConfig:
    mappings: tuple[KeyMapping, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "mappings", tuple(self.mappings))
        for entry in self.mappings:
            if not isinstance(entry, KeyMapping):
                raise TypeError("mappings entries must be KeyMapping")


@dataclass(frozen=True)
class KeyboardConfig:
    """Lighting and key-mapping configuration pushed to a keyboard.

    Both parts are optional; `KeyboardConfig()` is the empty configuration.
    """

    light_mode: Optional[LightModeConfig] = None
    key_mapping: Optional[KeyMappingConfig] = None

    def __post_init__(self) -> None:
        if self.light_mode is not None and not isinstance(self.light_mode, LightModeConfig):
            raise TypeError("light_mode must be a LightModeConfig or None")
        if self.key_mapping is not None and not isinstance(self.key_mapping, KeyMappingConfig):
            raise TypeError("key_mapping must be a KeyMappingConfig or None")

    @property
    def is_empty(self) -> bool:
        return self.light_mode is None and self.key_mapping is None


@dataclass(frozen=True)
class ProfileDraft:
    """A profile as supplied by callers; timestamps are managed by the store."""

    id: str
    name: str
    identity: DeviceIdentity
    config: KeyboardConfig = field(default_factory=KeyboardConfig)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("profile id must be a non-empty string")
        if not isinstance(self.name, str):
            raise TypeError("profile name must be a string")
        if not isinstance(self.identity, DeviceIdentity):
            raise TypeError("identity must be a DeviceIdentity")
        if not isinstance(self.config, KeyboardConfig):
            raise TypeError("config must be a KeyboardConfig")


@dataclass(frozen=True)
class ProfileRecord:
    id: str
    name: str
    identity: DeviceIdentity
    config: KeyboardConfig
    created_at: int
    updated_at: int

    def to_draft(self) -> ProfileDraft:
        return ProfileDraft(id=self.id, name=self.name, identity=self.identity, config=self.config)


@dataclass(frozen=True)
class DeviceConfigRecord:
    identity: DeviceIdentity
    config: KeyboardConfig
    selected_profile_id: Optional[str]
    updated_at: int
