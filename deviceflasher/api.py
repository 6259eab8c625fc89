"""Stable public API for building tooling on top of deviceflasher.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from deviceflasher.core.config import Settings, load_settings
from deviceflasher.core.errors import (
    CommandFailureError,
    ConfigError,
    DeviceDiscoveryError,
    DeviceFlasherError,
    FactoryImageError,
    FlashAllError,
    ImageExtractError,
    ImageValidationError,
    LockBootloaderError,
    NoDevicesFoundError,
    PlatformToolsError,
    RebootFailureError,
    ToolNotFoundError,
    UnlockBootloaderError,
)
from deviceflasher.core.flash import Flasher
from deviceflasher.core.interfaces import (
    ADBFlasher,
    FactoryImageFlasher,
    FastbootFlasher,
    PlatformToolsFlasher,
)
from deviceflasher.core.model import Device, FlashResult, LockStatus, ToolName
from deviceflasher.factoryimage import FactoryImage
from deviceflasher.platformtools.adb import ADB
from deviceflasher.platformtools.fastboot import Fastboot
from deviceflasher.platformtools.paths import PlatformTools

__all__ = [
    "DeviceFlasherError",
    "ConfigError",
    "DeviceDiscoveryError",
    "NoDevicesFoundError",
    "FactoryImageError",
    "ImageExtractError",
    "ImageValidationError",
    "FlashAllError",
    "PlatformToolsError",
    "ToolNotFoundError",
    "CommandFailureError",
    "UnlockBootloaderError",
    "LockBootloaderError",
    "RebootFailureError",
    "Device",
    "FlashResult",
    "LockStatus",
    "ToolName",
    "ADBFlasher",
    "FastbootFlasher",
    "FactoryImageFlasher",
    "PlatformToolsFlasher",
    "Flasher",
    "FactoryImage",
    "Settings",
    "load_settings",
    "Client",
]


class Client:
    """Public client wiring the real adb/fastboot/factory image collaborators.

    The factory image is extracted lazily and removed by `close` (or when the
    client is used as a context manager).
    """

    def __init__(self, image: Path | str | None = None, *, settings: Settings | None = None) -> None:
        self.settings = settings or load_settings()
        platform_tools = PlatformTools(self.settings.host_os, self.settings.platform_tools_path)
        # discovery alone never touches the image
        self.factory_image = FactoryImage(image or "", self.settings.host_os)
        self._flasher = Flasher(
            factory_image=self.factory_image,
            platform_tools=platform_tools,
            adb=ADB(platform_tools.path(), self.settings.host_os),
            fastboot=Fastboot(
                platform_tools.path(),
                self.settings.host_os,
                lock_timeout_s=self.settings.lock_timeout_s,
                poll_interval_s=self.settings.poll_interval_s,
            ),
        )

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.factory_image.cleanup()

    def discover_devices(self) -> dict[str, Device]:
        return self._flasher.discover_devices()

    def flash(self, device: Device) -> None:
        self._flasher.flash(device)

    def flash_devices(self, devices: list[Device], *, parallel: bool | None = None) -> list[FlashResult]:
        """Flash each device independently; one failure never stops the others."""
        if parallel is None:
            parallel = self.settings.parallel
        # shared by every flash, so extract before any of them start
        self.factory_image.extract()
        if parallel and len(devices) > 1:
            with ThreadPoolExecutor(max_workers=len(devices)) as pool:
                return list(pool.map(self._flash_one, devices))
        return [self._flash_one(device) for device in devices]

    def _flash_one(self, device: Device) -> FlashResult:
        try:
            self.flash(device)
        except DeviceFlasherError as exc:
            return FlashResult(device=device, error=exc)
        return FlashResult(device=device)
