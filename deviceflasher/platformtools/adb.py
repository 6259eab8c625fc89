"""adb wrapper used while the device runs its OS."""

from __future__ import annotations

from deviceflasher.core.errors import CommandFailureError
from deviceflasher.core.model import PlatformToolsPath, ToolName
from deviceflasher.platformtools.command import executable_path, run_tool

_HEADER = "List of devices attached"


class ADB:
    def __init__(self, path: PlatformToolsPath, host_os: str) -> None:
        self.executable = executable_path(path, ToolName.ADB.value, host_os)
        self.host_os = host_os

    def get_device_ids(self) -> list[str]:
        output = run_tool(self.executable, ["devices"])
        device_ids: list[str] = []
        for line in output.splitlines():
            line = line.strip()
            if not line or line.startswith(_HEADER) or line.startswith("*"):
                continue
            device_ids.append(line.split()[0])
        return device_ids

    def get_device_codename(self, device_id: str) -> str:
        return self._get_prop("ro.product.device", device_id)

    def reboot_into_bootloader(self, device_id: str) -> None:
        run_tool(self.executable, ["-s", device_id, "reboot", "bootloader"])

    def kill_server(self) -> None:
        run_tool(self.executable, ["kill-server"])

    def name(self) -> ToolName:
        return ToolName.ADB

    def _get_prop(self, prop: str, device_id: str) -> str:
        output = run_tool(self.executable, ["-s", device_id, "shell", "getprop", prop])
        value = output.strip().strip("[]").strip()
        if not value:
            raise CommandFailureError(f"Property {prop} is empty on {device_id}")
        return value
