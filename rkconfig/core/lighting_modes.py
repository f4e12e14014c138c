"""Canonical lighting mode catalog.

RGB boards and single-color boards number their firmware modes differently,
so the same effect name maps to different mode bits per family. List order is
the order shown in the UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional


@dataclass(frozen=True)
class LightingMode:
    name: str
    mode_bit: int


RGB_CUSTOM_MODE_BIT: Final[int] = 0
SINGLE_COLOR_CUSTOM_MODE_BIT: Final[int] = 2


RGB_MODES: Final[tuple[LightingMode, ...]] = (
    LightingMode("Custom", 0),
    LightingMode("Ambilight", 14),
    LightingMode("Breathing", 17),
    LightingMode("Diagonal Transformation", 13),
    LightingMode("Flash Away", 20),
    LightingMode("Layer Upon Layer", 7),
    LightingMode("Marquee Effect", 9),
    LightingMode("Neon", 18),
    LightingMode("Neon Stream", 1),
    LightingMode("Rainbow Roulette", 5),
    LightingMode("Retro Snake", 12),
    LightingMode("Rich And Honored", 8),
    LightingMode("Ripples Shining", 2),
    LightingMode("Rotating Storm", 10),
    LightingMode("Rotating Windmill", 3),
    LightingMode("Serpentine Horse Race", 11),
    LightingMode("Shadow Disappear", 19),
    LightingMode("Sine Wave", 4),
    LightingMode("Stars Twinkle", 6),
    LightingMode("Steady", 16),
    LightingMode("Streamer", 15),
)


SINGLE_COLOR_MODES: Final[tuple[LightingMode, ...]] = (
    LightingMode("Steady", 1),
    LightingMode("Custom", 2),
    LightingMode("Breathing", 3),
    LightingMode("Press And Destroy", 4),
    LightingMode("Neon Stream", 5),
    LightingMode("Streamer", 6),
    LightingMode("Ambilight", 7),
    LightingMode("Drippling Ripples", 8),
    LightingMode("Brilliant Point", 9),
    LightingMode("Flash Away", 10),
    LightingMode("Shadow Disappear", 11),
    LightingMode("Ripples Shining", 12),
    LightingMode("Rich And Honored", 13),
    LightingMode("Marquee Effect", 14),
    LightingMode("Rotating Storm", 15),
    LightingMode("Serpentine Horse Race", 16),
    LightingMode("Stars Twinkle", 17),
    LightingMode("Retro Snake", 18),
    LightingMode("Diagonal Transformation", 19),
    LightingMode("Sine Wave", 20),
)


# Fast lookups (avoid rescanning the tuples on every UI refresh).
_RGB_BY_BIT: Final[dict[int, LightingMode]] = {m.mode_bit: m for m in RGB_MODES}
_SINGLE_BY_BIT: Final[dict[int, LightingMode]] = {m.mode_bit: m for m in SINGLE_COLOR_MODES}


def get_lighting_modes(is_rgb: bool) -> list[LightingMode]:
    return list(RGB_MODES if is_rgb else SINGLE_COLOR_MODES)


def is_custom_mode(mode_bit: int, is_rgb: bool) -> bool:
    """True when *mode_bit* selects per-key custom colors for this board family."""

    if is_rgb:
        return mode_bit == RGB_CUSTOM_MODE_BIT
    return mode_bit == SINGLE_COLOR_CUSTOM_MODE_BIT


def mode_name(mode_bit: int, is_rgb: bool) -> Optional[str]:
    mode = (_RGB_BY_BIT if is_rgb else _SINGLE_BY_BIT).get(int(mode_bit))
    return mode.name if mode is not None else None
