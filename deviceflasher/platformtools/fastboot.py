"""fastboot wrapper used while the device sits in its bootloader."""

from __future__ import annotations

import logging
import re
import time

from deviceflasher.core.errors import (
    CommandFailureError,
    LockBootloaderError,
    PlatformToolsError,
    RebootFailureError,
    UnlockBootloaderError,
)
from deviceflasher.core.model import LockStatus, PlatformToolsPath, ToolName
from deviceflasher.platformtools.command import executable_path, run_tool

LOGGER = logging.getLogger(__name__)

_GETVAR_RE = "^{var}:\\s*(\\S+)"


class Fastboot:
    def __init__(
        self,
        path: PlatformToolsPath,
        host_os: str,
        *,
        lock_timeout_s: float = 300.0,
        poll_interval_s: float = 5.0,
    ) -> None:
        self.executable = executable_path(path, ToolName.FASTBOOT.value, host_os)
        self.host_os = host_os
        self.lock_timeout_s = lock_timeout_s
        self.poll_interval_s = poll_interval_s

    def get_device_ids(self) -> list[str]:
        output = run_tool(self.executable, ["devices"])
        return [line.split()[0] for line in output.splitlines() if line.strip()]

    def get_device_codename(self, device_id: str) -> str:
        return self._getvar("product", device_id)

    def get_bootloader_lock_status(self, device_id: str) -> LockStatus:
        unlocked = self._getvar("unlocked", device_id)
        if unlocked == "yes":
            return LockStatus.UNLOCKED
        if unlocked == "no":
            return LockStatus.LOCKED
        raise CommandFailureError(f"Unexpected bootloader unlocked value '{unlocked}' from {device_id}")

    def set_bootloader_lock_status(self, device_id: str, status: LockStatus) -> None:
        if status is LockStatus.UNLOCKED:
            command, error_cls = "unlock", UnlockBootloaderError
        elif status is LockStatus.LOCKED:
            command, error_cls = "lock", LockBootloaderError
        else:
            raise CommandFailureError(f"Cannot set bootloader lock status to {status.value}")

        try:
            run_tool(self.executable, ["-s", device_id, "flashing", command])
        except PlatformToolsError as exc:
            raise error_cls(f"fastboot flashing {command} failed for {device_id}: {exc}") from exc

        # The operator has to confirm on the device before the status changes.
        deadline = time.monotonic() + self.lock_timeout_s
        while True:
            try:
                current = self.get_bootloader_lock_status(device_id)
            except PlatformToolsError as exc:
                LOGGER.debug("%s: lock status unavailable while waiting: %s", device_id, exc)
                current = LockStatus.UNKNOWN
            if current is status:
                return
            if time.monotonic() >= deadline:
                raise error_cls(
                    f"Timed out after {self.lock_timeout_s:g}s waiting for {device_id} to become {status.value}"
                )
            time.sleep(self.poll_interval_s)

    def reboot(self, device_id: str) -> None:
        try:
            run_tool(self.executable, ["-s", device_id, "reboot"])
        except PlatformToolsError as exc:
            raise RebootFailureError(f"fastboot reboot failed for {device_id}: {exc}") from exc

    def name(self) -> ToolName:
        return ToolName.FASTBOOT

    def _getvar(self, var: str, device_id: str) -> str:
        output = run_tool(self.executable, ["-s", device_id, "getvar", var])
        match = re.search(_GETVAR_RE.format(var=var), output, re.MULTILINE)
        if not match:
            raise CommandFailureError(f"fastboot getvar {var} returned no value for {device_id}")
        return match.group(1)
