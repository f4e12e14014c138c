"""KeyboardConfig <-> JSON.

The wire shape is the snake_case document the HID transport consumes:

    {"light_mode": {"mode_bit": 3, "animation": 1, "brightness": 100,
                    "random_colors": false, "sleep": 0,
                    "color": {"r": 255, "g": 0, "b": 0},
                    "custom_colors": [{"buffer_index": 7, "color": {...}}]},
     "key_mapping": {"mappings": [{"buffer_index": 7, "key_code": 4}]}}

Absent optional parts are omitted, so the empty config is "{}". Unknown keys are
ignored on load; anything else that does not fit raises SerializationError.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import SerializationError
from .models import (
    KeyboardConfig,
    KeyMapping,
    KeyMappingConfig,
    LightModeConfig,
    PerKeyColor,
    RgbColor,
)


def _color_to_dict(color: RgbColor) -> dict[str, int]:
    return {"r": color.r, "g": color.g, "b": color.b}


def config_to_dict(config: KeyboardConfig) -> dict[str, Any]:
    """Convert a KeyboardConfig to a JSON-ready dict."""

    if not isinstance(config, KeyboardConfig):
        raise TypeError(f"expected KeyboardConfig, got {type(config).__name__}")

    out: dict[str, Any] = {}

    lm = config.light_mode
    if lm is not None:
        light: dict[str, Any] = {
            "mode_bit": lm.mode_bit,
            "animation": lm.animation,
            "brightness": lm.brightness,
            "random_colors": lm.random_colors,
            "sleep": lm.sleep,
        }
        if lm.color is not None:
            light["color"] = _color_to_dict(lm.color)
        if lm.custom_colors is not None:
            light["custom_colors"] = [
                {"buffer_index": c.index, "color": _color_to_dict(c.color)} for c in lm.custom_colors
            ]
        out["light_mode"] = light

    km = config.key_mapping
    if km is not None:
        out["key_mapping"] = {
            "mappings": [{"buffer_index": m.index, "key_code": m.key_code} for m in km.mappings],
        }

    return out


def _require(doc: dict, key: str, where: str) -> Any:
    if key not in doc:
        raise SerializationError(f"missing {where}.{key}")
    return doc[key]


def _as_dict(value: Any, where: str) -> dict:
    if not isinstance(value, dict):
        raise SerializationError(f"{where} must be an object, got {type(value).__name__}")
    return value


def _as_list(value: Any, where: str) -> list:
    if not isinstance(value, list):
        raise SerializationError(f"{where} must be an array, got {type(value).__name__}")
    return value


def _color_from_dict(value: Any, where: str) -> RgbColor:
    doc = _as_dict(value, where)
    return RgbColor(_require(doc, "r", where), _require(doc, "g", where), _require(doc, "b", where))


def _light_mode_from_dict(value: Any) -> LightModeConfig:
    doc = _as_dict(value, "light_mode")

    color = doc.get("color")
    custom = doc.get("custom_colors")

    custom_colors = None
    if custom is not None:
        custom_colors = tuple(
            PerKeyColor(
                index=_require(_as_dict(entry, f"custom_colors[{i}]"), "buffer_index", f"custom_colors[{i}]"),
                color=_color_from_dict(_require(entry, "color", f"custom_colors[{i}]"), f"custom_colors[{i}].color"),
            )
            for i, entry in enumerate(_as_list(custom, "light_mode.custom_colors"))
        )

    return LightModeConfig(
        mode_bit=_require(doc, "mode_bit", "light_mode"),
        animation=_require(doc, "animation", "light_mode"),
        brightness=_require(doc, "brightness", "light_mode"),
        random_colors=_require(doc, "random_colors", "light_mode"),
        sleep=_require(doc, "sleep", "light_mode"),
        color=None if color is None else _color_from_dict(color, "light_mode.color"),
        custom_colors=custom_colors,
    )


def _key_mapping_from_dict(value: Any) -> KeyMappingConfig:
    doc = _as_dict(value, "key_mapping")
    mappings = []
    for i, entry in enumerate(_as_list(_require(doc, "mappings", "key_mapping"), "key_mapping.mappings")):
        where = f"mappings[{i}]"
        entry = _as_dict(entry, where)
        mappings.append(KeyMapping(index=_require(entry, "buffer_index", where), key_code=_require(entry, "key_code", where)))
    return KeyMappingConfig(mappings=tuple(mappings))


def config_from_dict(data: Any) -> KeyboardConfig:
    """Build a KeyboardConfig from a decoded JSON document.

    Raises SerializationError when the document does not describe a config.
    """

    doc = _as_dict(data, "config")
    try:
        light = doc.get("light_mode")
        keys = doc.get("key_mapping")
        return KeyboardConfig(
            light_mode=None if light is None else _light_mode_from_dict(light),
            key_mapping=None if keys is None else _key_mapping_from_dict(keys),
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError("stored config has invalid field values", cause=exc) from exc


def dumps_config(config: KeyboardConfig) -> str:
    payload = config_to_dict(config)
    try:
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise SerializationError("config could not be encoded", cause=exc) from exc


def loads_config(text: str | bytes) -> KeyboardConfig:
    try:
        raw = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError("stored config is not valid JSON", cause=exc) from exc
    return config_from_dict(raw)
