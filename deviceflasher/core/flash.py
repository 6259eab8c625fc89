"""Device discovery and the per-device flashing sequence."""

from __future__ import annotations

import logging

from deviceflasher.core.errors import CommandFailureError, DeviceFlasherError, NoDevicesFoundError
from deviceflasher.core.interfaces import (
    ADBFlasher,
    FactoryImageFlasher,
    FastbootFlasher,
    PlatformToolsFlasher,
)
from deviceflasher.core.model import Device, LockStatus, ToolName

LOGGER = logging.getLogger(__name__)


class Flasher:
    """Discovers attached devices and flashes a factory image onto them.

    All four collaborators are injected so that discovery and flashing only
    ever talk to the outside world through them. A `Flasher` holds no state
    between calls; `flash` may be called once per discovered device.
    """

    def __init__(
        self,
        *,
        factory_image: FactoryImageFlasher,
        platform_tools: PlatformToolsFlasher,
        adb: ADBFlasher,
        fastboot: FastbootFlasher,
    ) -> None:
        self.factory_image = factory_image
        self.platform_tools = platform_tools
        self.adb = adb
        self.fastboot = fastboot

    def flash(self, device: Device) -> None:
        """Unlock, flash, re-lock and reboot `device`.

        The first fatal error is re-raised unchanged. Failing to reboot into
        the bootloader or out of it is only logged. The adb server is killed
        on every exit path.
        """
        try:
            self._flash(device)
        finally:
            self._kill_adb_server(device)

    def _flash(self, device: Device) -> None:
        LOGGER.info("%s: validating factory image for %s", device.id, device.codename)
        self.factory_image.validate(device.codename)

        if device.discovery_tool is ToolName.ADB:
            LOGGER.info("%s: rebooting into bootloader", device.id)
            try:
                self.adb.reboot_into_bootloader(device.id)
            except DeviceFlasherError as exc:
                LOGGER.warning("%s: reboot into bootloader failed: %s", device.id, exc)

        LOGGER.info("%s: checking bootloader lock status", device.id)
        status = self.fastboot.get_bootloader_lock_status(device.id)
        if status is LockStatus.UNKNOWN:
            raise CommandFailureError(f"Bootloader lock status of {device.id} is unknown")

        if status is LockStatus.LOCKED:
            LOGGER.info(
                "%s: unlocking bootloader, confirm with the volume and power keys on the device",
                device.id,
            )
            self.fastboot.set_bootloader_lock_status(device.id, LockStatus.UNLOCKED)

        path = self.platform_tools.path()
        LOGGER.info("%s: flashing factory image", device.id)
        # a failed flash leaves the bootloader unlocked so a retry can skip unlocking
        self.factory_image.flash_all(path, serial=device.id)

        LOGGER.info(
            "%s: locking bootloader, confirm with the volume and power keys on the device",
            device.id,
        )
        self.fastboot.set_bootloader_lock_status(device.id, LockStatus.LOCKED)

        LOGGER.info("%s: rebooting", device.id)
        try:
            self.fastboot.reboot(device.id)
        except DeviceFlasherError as exc:
            LOGGER.warning("%s: reboot failed: %s", device.id, exc)

        LOGGER.info("%s: flashing complete", device.id)

    def _kill_adb_server(self, device: Device) -> None:
        try:
            self.adb.kill_server()
        except Exception as exc:
            LOGGER.debug("%s: could not kill adb server: %s", device.id, exc)

    def discover_devices(self) -> dict[str, Device]:
        """Return attached devices keyed by serial.

        adb is queried first and fastboot second; a fastboot sighting replaces
        an adb sighting of the same serial.
        """
        devices: dict[str, Device] = {}
        for tool, discovery_tool in ((self.adb, ToolName.ADB), (self.fastboot, ToolName.FASTBOOT)):
            for device in _devices_from(tool, discovery_tool):
                devices[device.id] = device

        LOGGER.debug(
            "discovered %d device(s) via %s and %s",
            len(devices),
            self.adb.name().value,
            self.fastboot.name().value,
        )
        if not devices:
            raise NoDevicesFoundError("No devices found. Connect a device over USB and retry.")
        return devices


def _devices_from(tool: ADBFlasher | FastbootFlasher, discovery_tool: ToolName) -> list[Device]:
    try:
        device_ids = tool.get_device_ids()
    except DeviceFlasherError as exc:
        LOGGER.debug("%s device listing failed: %s", discovery_tool.value, exc)
        return []

    devices: list[Device] = []
    for device_id in device_ids or ():
        try:
            codename = tool.get_device_codename(device_id)
        except DeviceFlasherError as exc:
            LOGGER.debug("%s: skipping, codename unavailable via %s: %s", device_id, discovery_tool.value, exc)
            continue
        devices.append(Device(id=device_id, codename=codename, discovery_tool=discovery_tool))
    return devices
