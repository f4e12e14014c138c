"""Glue between the transport and the store.

The repository never talks to hardware. These helpers push a config through a
`ConfigSender` first and persist it only after the keyboard accepted it.
"""

from __future__ import annotations

import asyncio
import logging

from .devices import ConfigSender, KeyboardDescriptor
from .store.models import KeyboardConfig
from .store.repository import ProfileRepository
from .utils.exceptions import is_device_busy, is_device_disconnected, is_permission_denied

logger = logging.getLogger(__name__)


def _describe_send_error(exc: OSError) -> str:
    if is_device_disconnected(exc):
        return "device disconnected"
    if is_device_busy(exc):
        return "device busy"
    if is_permission_denied(exc):
        return "permission denied (check udev rules)"
    return str(exc)


async def send_config(sender: ConfigSender, keyboard: KeyboardDescriptor, config: KeyboardConfig) -> bool:
    """Push *config* to *keyboard* off the event loop.

    OSErrors from the transport are logged and reported as False.
    """

    try:
        ok = await asyncio.to_thread(sender.send_keyboard_config, keyboard.path, config, keyboard)
    except OSError as exc:
        logger.warning("Failed to send config to %s (%s): %s", keyboard.name, keyboard.identity, _describe_send_error(exc))
        return False

    if not ok:
        logger.warning("Keyboard %s (%s) rejected config", keyboard.name, keyboard.identity)
    return bool(ok)


async def apply_config(
    repo: ProfileRepository,
    sender: ConfigSender,
    keyboard: KeyboardDescriptor,
    config: KeyboardConfig,
) -> bool:
    """Send *config* and, if accepted, store it as the device's current config."""

    if not await send_config(sender, keyboard, config):
        return False
    await repo.save_device_config(keyboard.identity, config)
    return True


async def apply_profile(
    repo: ProfileRepository,
    sender: ConfigSender,
    keyboard: KeyboardDescriptor,
    profile_id: str,
) -> bool:
    """Send a stored profile to *keyboard* and make it the selected profile.

    Returns False without touching the store when the profile does not exist,
    belongs to another device, or the keyboard rejects it.
    """

    profile = await repo.get_profile(profile_id)
    if profile is None:
        logger.info("Profile %s not found; nothing applied", profile_id)
        return False
    if profile.identity != keyboard.identity:
        logger.warning("Profile %s belongs to %s, not %s", profile_id, profile.identity, keyboard.identity)
        return False

    if not await apply_config(repo, sender, keyboard, profile.config):
        return False

    await repo.set_selected_profile(keyboard.identity, profile.id)
    logger.info("Applied profile %r to %s", profile.name, keyboard.name)
    return True


async def restore_last_config(
    repo: ProfileRepository,
    sender: ConfigSender,
    keyboard: KeyboardDescriptor,
) -> bool:
    """Re-send the stored config to a freshly connected keyboard.

    Returns True if a non-empty stored config was sent successfully.
    """

    config = await repo.get_device_config(keyboard.identity)
    if config is None or config.is_empty:
        return False
    return await send_config(sender, keyboard, config)
