"""Core data models used across discovery, flashing, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

PlatformToolsPath = Path


class ToolName(str, Enum):
    ADB = "adb"
    FASTBOOT = "fastboot"


class LockStatus(Enum):
    UNKNOWN = "unknown"
    LOCKED = "locked"
    UNLOCKED = "unlocked"


@dataclass(frozen=True)
class Device:
    id: str
    codename: str
    discovery_tool: ToolName


@dataclass(frozen=True)
class FlashResult:
    device: Device
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
