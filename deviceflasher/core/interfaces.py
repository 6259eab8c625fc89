"""Collaborator interfaces consumed by the flasher."""

from __future__ import annotations

from typing import Protocol

from deviceflasher.core.model import LockStatus, PlatformToolsPath, ToolName


class FactoryImageFlasher(Protocol):
    def validate(self, codename: str) -> None:
        """Raise if the image is not meant for devices with this codename."""

    def flash_all(self, platform_tools_path: PlatformToolsPath, *, serial: str | None = None) -> None:
        """Flash every partition of the image onto the device with this serial."""


class PlatformToolsFlasher(Protocol):
    def path(self) -> PlatformToolsPath:
        """Directory holding the adb and fastboot executables."""


class ADBFlasher(Protocol):
    def get_device_ids(self) -> list[str]: ...

    def get_device_codename(self, device_id: str) -> str: ...

    def reboot_into_bootloader(self, device_id: str) -> None: ...

    def kill_server(self) -> None: ...

    def name(self) -> ToolName: ...


class FastbootFlasher(Protocol):
    def get_device_ids(self) -> list[str]: ...

    def get_device_codename(self, device_id: str) -> str: ...

    def get_bootloader_lock_status(self, device_id: str) -> LockStatus: ...

    def set_bootloader_lock_status(self, device_id: str, status: LockStatus) -> None: ...

    def reboot(self, device_id: str) -> None: ...

    def name(self) -> ToolName: ...
