"""Locating the platform-tools directory."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from deviceflasher.core.errors import ToolNotFoundError
from deviceflasher.core.model import PlatformToolsPath, ToolName
from deviceflasher.platformtools.command import executable_path

LOGGER = logging.getLogger(__name__)


class PlatformTools:
    """Directory holding both adb and fastboot.

    An explicitly configured directory wins; otherwise the directory of the
    `fastboot` found on PATH is used.
    """

    def __init__(self, host_os: str, path: Path | str | None = None) -> None:
        self.host_os = host_os
        self._path = _resolve(host_os, Path(path).expanduser() if path else None)
        LOGGER.debug("using platform-tools at %s", self._path)

    def path(self) -> PlatformToolsPath:
        return self._path


def _resolve(host_os: str, configured: Path | None) -> Path:
    if configured is None:
        found = shutil.which(ToolName.FASTBOOT.value)
        if found is None:
            raise ToolNotFoundError(
                "fastboot not found on PATH. Install Android platform-tools or pass --platform-tools."
            )
        configured = Path(found).resolve().parent

    if not configured.is_dir():
        raise ToolNotFoundError(f"Platform-tools directory {configured} does not exist")
    for tool in ToolName:
        executable_path(configured, tool.value, host_os)
    return configured
