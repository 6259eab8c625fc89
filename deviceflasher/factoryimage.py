"""Factory image archive handling."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import zipfile
from pathlib import Path

from deviceflasher.core.errors import FlashAllError, ImageExtractError, ImageValidationError
from deviceflasher.core.model import PlatformToolsPath

LOGGER = logging.getLogger(__name__)


class FactoryImage:
    """A vendor factory image zip, e.g. `crosshatch-factory-qq3a.200805.001.zip`.

    The archive holds a single top-level directory named after the device
    codename and build (`crosshatch-qq3a.200805.001`) that contains the
    flash-all script and the nested image zip. The archive is unpacked into a
    temporary working directory on first use; call `cleanup` (or use the
    image as a context manager) to remove it.
    """

    def __init__(self, archive: Path | str, host_os: str) -> None:
        self.archive = Path(archive)
        self.host_os = host_os
        self._workdir: Path | None = None
        self._image_dir: Path | None = None

    def __enter__(self) -> FactoryImage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()

    @property
    def flash_all_script(self) -> str:
        return "flash-all.bat" if self.host_os == "windows" else "flash-all.sh"

    def extract(self) -> Path:
        if self._image_dir is not None:
            return self._image_dir

        workdir = Path(tempfile.mkdtemp(prefix="deviceflasher-"))
        LOGGER.info("extracting %s", self.archive)
        try:
            with zipfile.ZipFile(self.archive) as archive:
                archive.extractall(workdir)
        except (OSError, zipfile.BadZipFile) as exc:
            shutil.rmtree(workdir, ignore_errors=True)
            raise ImageExtractError(f"Could not extract factory image {self.archive}: {exc}") from exc

        entries = [p for p in workdir.iterdir() if p.is_dir()]
        if len(entries) != 1:
            shutil.rmtree(workdir, ignore_errors=True)
            raise ImageExtractError(
                f"Factory image {self.archive} must contain exactly one top-level directory"
            )

        self._workdir = workdir
        self._image_dir = entries[0]
        return self._image_dir

    def cleanup(self) -> None:
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
        self._workdir = None
        self._image_dir = None

    def validate(self, codename: str) -> None:
        image_dir = self.extract()
        if not image_dir.name.startswith(f"{codename}-"):
            raise ImageValidationError(
                f"Factory image {image_dir.name} is not for device codename '{codename}'"
            )
        if not (image_dir / self.flash_all_script).is_file():
            raise ImageValidationError(
                f"Factory image {image_dir.name} is missing {self.flash_all_script}"
            )

    def flash_all(self, platform_tools_path: PlatformToolsPath, *, serial: str | None = None) -> None:
        """Run the flash-all script, pinned to `serial` when given."""
        image_dir = self.extract()
        script = image_dir / self.flash_all_script
        if not script.is_file():
            raise FlashAllError(f"{script} does not exist")

        if self.host_os == "windows":
            cmd = ["cmd", "/c", str(script)]
        else:
            cmd = ["bash", str(script)]
        env = dict(os.environ)
        env["PATH"] = os.pathsep.join([str(platform_tools_path), env.get("PATH", "")])
        if serial:
            # adb and fastboot both honour ANDROID_SERIAL when -s is not passed
            env["ANDROID_SERIAL"] = serial

        LOGGER.debug("running %s in %s", " ".join(cmd), image_dir)
        try:
            result = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                errors="replace",
                cwd=image_dir,
                env=env,
            )
        except OSError as exc:
            raise FlashAllError(f"Could not run {script}: {exc}") from exc

        if result.returncode != 0:
            output = ((result.stdout or "") + (result.stderr or "")).strip()
            raise FlashAllError(f"{self.flash_all_script} exited with {result.returncode}: {output}")
