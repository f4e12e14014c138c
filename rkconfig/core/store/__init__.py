"""Device-scoped configuration and profile store.

Typical use:

    handle = StorageHandle(StoreSettings.from_env())
    repo = ProfileRepository(handle)
    ...
    await handle.close()
"""

from __future__ import annotations

from typing import Optional

from ..config import StoreSettings
from .database import StorageHandle
from .errors import SchemaError, SerializationError, StorageError, StorageIOError
from .models import (
    DeviceConfigRecord,
    DeviceIdentity,
    KeyboardConfig,
    KeyMapping,
    KeyMappingConfig,
    LightModeConfig,
    PerKeyColor,
    ProfileDraft,
    ProfileRecord,
    RgbColor,
)
from .repository import ProfileRepository
from .schema import ensure_schema


async def open_repository(settings: Optional[StoreSettings] = None, **kwargs) -> ProfileRepository:
    """Open a handle for *settings* and wrap it in a repository.

    Extra keyword arguments go to ProfileRepository. Close it with
    `await repo.handle.close()`.
    """

    handle = await StorageHandle(settings).open()
    return ProfileRepository(handle, **kwargs)


__all__ = [
    "DeviceConfigRecord",
    "DeviceIdentity",
    "KeyboardConfig",
    "KeyMapping",
    "KeyMappingConfig",
    "LightModeConfig",
    "PerKeyColor",
    "ProfileDraft",
    "ProfileRecord",
    "ProfileRepository",
    "RgbColor",
    "SchemaError",
    "SerializationError",
    "StorageError",
    "StorageHandle",
    "StorageIOError",
    "StoreSettings",
    "ensure_schema",
    "open_repository",
]
