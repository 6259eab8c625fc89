from __future__ import annotations

from pathlib import Path

import pytest

from deviceflasher.core.errors import (
    CommandFailureError,
    FlashAllError,
    ImageValidationError,
    LockBootloaderError,
    RebootFailureError,
    UnlockBootloaderError,
)
from deviceflasher.core.flash import Flasher
from deviceflasher.core.model import Device, LockStatus, ToolName
from fakes import CallLog, FakeADB, FakeFactoryImage, FakeFastboot, FakePlatformTools

ADB_DEVICE = Device(id="8AAY0GK9A", codename="crosshatch", discovery_tool=ToolName.ADB)
FASTBOOT_DEVICE = Device(id="8AAY0GK9A", codename="crosshatch", discovery_tool=ToolName.FASTBOOT)


def _flasher(
    log: CallLog,
    *,
    image: dict | None = None,
    adb: dict | None = None,
    fastboot: dict | None = None,
) -> Flasher:
    return Flasher(
        factory_image=FakeFactoryImage(log, **(image or {})),
        platform_tools=FakePlatformTools(log),
        adb=FakeADB(log, **(adb or {})),
        fastboot=FakeFastboot(log, **(fastboot or {})),
    )


def test_happy_path_flash_successful() -> None:
    log = CallLog()
    _flasher(log).flash(ADB_DEVICE)

    assert log.calls == [
        ("validate", "crosshatch"),
        ("reboot_into_bootloader", "8AAY0GK9A"),
        ("get_bootloader_lock_status", "8AAY0GK9A"),
        ("set_bootloader_lock_status", "8AAY0GK9A", LockStatus.UNLOCKED),
        ("path",),
        ("flash_all", Path("/tmp"), "8AAY0GK9A"),
        ("set_bootloader_lock_status", "8AAY0GK9A", LockStatus.LOCKED),
        ("reboot", "8AAY0GK9A"),
        ("kill_server",),
    ]


def test_device_discovered_through_fastboot_skips_adb_reboot() -> None:
    log = CallLog()
    _flasher(log).flash(FASTBOOT_DEVICE)

    assert log.count("reboot_into_bootloader") == 0
    assert log.count("flash_all") == 1
    assert log.count("kill_server") == 1


def test_unlocked_device_skips_unlocking_step() -> None:
    log = CallLog()
    _flasher(log, fastboot={"lock_status": LockStatus.UNLOCKED}).flash(ADB_DEVICE)

    lock_calls = [c for c in log.calls if c[0] == "set_bootloader_lock_status"]
    assert lock_calls == [("set_bootloader_lock_status", "8AAY0GK9A", LockStatus.LOCKED)]
    assert log.count("flash_all") == 1


def test_factory_image_validation_failure() -> None:
    log = CallLog()
    error = ImageValidationError("wrong device")

    with pytest.raises(ImageValidationError) as exc:
        _flasher(log, image={"validate_error": error}).flash(ADB_DEVICE)

    assert exc.value is error
    assert log.names() == ["validate", "kill_server"]


def test_adb_reboot_bootloader_error_not_fatal() -> None:
    log = CallLog()
    _flasher(log, adb={"reboot_error": RebootFailureError("not fatal")}).flash(ADB_DEVICE)

    assert log.count("reboot_into_bootloader") == 1
    assert log.count("flash_all") == 1
    assert log.count("reboot") == 1
    assert log.count("kill_server") == 1


def test_get_bootloader_status_failure() -> None:
    log = CallLog()
    error = CommandFailureError("getvar failed")

    with pytest.raises(CommandFailureError) as exc:
        _flasher(log, fastboot={"status_error": error}).flash(ADB_DEVICE)

    assert exc.value is error
    assert log.names() == [
        "validate",
        "reboot_into_bootloader",
        "get_bootloader_lock_status",
        "kill_server",
    ]


def test_unknown_bootloader_status_is_fatal() -> None:
    log = CallLog()

    with pytest.raises(CommandFailureError):
        _flasher(log, fastboot={"lock_status": LockStatus.UNKNOWN}).flash(FASTBOOT_DEVICE)

    assert log.count("set_bootloader_lock_status") == 0
    assert log.count("flash_all") == 0
    assert log.count("kill_server") == 1


def test_set_bootloader_status_unlock_failure() -> None:
    log = CallLog()
    error = UnlockBootloaderError("denied")

    with pytest.raises(UnlockBootloaderError) as exc:
        _flasher(log, fastboot={"unlock_error": error}).flash(ADB_DEVICE)

    assert exc.value is error
    assert log.count("flash_all") == 0
    assert log.names()[-1] == "kill_server"


def test_flash_all_error_leaves_bootloader_unlocked() -> None:
    log = CallLog()
    error = FlashAllError("partition write failed")

    with pytest.raises(FlashAllError) as exc:
        _flasher(log, image={"flash_error": error}).flash(ADB_DEVICE)

    assert exc.value is error
    lock_calls = [c for c in log.calls if c[0] == "set_bootloader_lock_status"]
    assert lock_calls == [("set_bootloader_lock_status", "8AAY0GK9A", LockStatus.UNLOCKED)]
    assert log.count("reboot") == 0
    assert log.count("kill_server") == 1


def test_set_bootloader_status_lock_failure() -> None:
    log = CallLog()
    error = LockBootloaderError("lock refused")

    with pytest.raises(LockBootloaderError) as exc:
        _flasher(log, fastboot={"lock_error": error}).flash(ADB_DEVICE)

    assert exc.value is error
    assert log.count("reboot") == 0
    assert log.count("kill_server") == 1


def test_reboot_error_is_not_fatal() -> None:
    log = CallLog()
    result = _flasher(log, fastboot={"reboot_error": RebootFailureError("usb reset")}).flash(ADB_DEVICE)

    assert result is None
    assert log.count("reboot") == 1
    assert log.count("kill_server") == 1


def test_kill_server_failure_is_ignored() -> None:
    log = CallLog()
    _flasher(log, adb={"kill_error": CommandFailureError("no server")}).flash(ADB_DEVICE)

    assert log.count("kill_server") == 1


def test_kill_server_failure_does_not_mask_fatal_error() -> None:
    log = CallLog()
    error = ImageValidationError("wrong device")

    with pytest.raises(ImageValidationError) as exc:
        _flasher(
            log,
            image={"validate_error": error},
            adb={"kill_error": CommandFailureError("no server")},
        ).flash(ADB_DEVICE)

    assert exc.value is error
