"""Subprocess helpers shared by the adb and fastboot wrappers."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from deviceflasher.core.errors import CommandFailureError, ToolNotFoundError

LOGGER = logging.getLogger(__name__)


def executable_path(directory: Path, tool: str, host_os: str) -> Path:
    executable = directory / tool
    if host_os == "windows":
        executable = executable.with_name(f"{tool}.exe")
    if not executable.is_file():
        raise ToolNotFoundError(f"{tool} not found at {executable}")
    return executable


def run_tool(executable: Path, args: Sequence[str]) -> str:
    """Run a platform tool and return its combined stdout/stderr.

    fastboot reports most results on stderr, so both streams are returned
    together, stdout first.
    """
    cmd = [str(executable), *args]
    LOGGER.debug("running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(f"Could not execute {executable}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CommandFailureError(f"Could not run {' '.join(cmd)}: {exc}") from exc

    output = (result.stdout or "") + (result.stderr or "")
    if result.returncode != 0:
        raise CommandFailureError(
            f"{' '.join(cmd)} exited with {result.returncode}: {output.strip()}"
        )
    return output
