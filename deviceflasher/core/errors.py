"""Domain-specific errors for deviceflasher."""


class DeviceFlasherError(Exception):
    """Base error for deviceflasher."""


class ConfigError(DeviceFlasherError):
    """Raised when the configuration file cannot be read or validated."""


class DeviceDiscoveryError(DeviceFlasherError):
    """Raised when device discovery cannot produce a usable result."""


class NoDevicesFoundError(DeviceDiscoveryError):
    """Raised when neither adb nor fastboot reports a usable device."""


class FactoryImageError(DeviceFlasherError):
    """Base factory image error."""


class ImageExtractError(FactoryImageError):
    """Raised when the factory image archive cannot be unpacked."""


class ImageValidationError(FactoryImageError):
    """Raised when the factory image does not match the device codename."""


class FlashAllError(FactoryImageError):
    """Raised when the flash-all script fails."""


class PlatformToolsError(DeviceFlasherError):
    """Base adb/fastboot error."""


class ToolNotFoundError(PlatformToolsError):
    """Raised when an adb or fastboot executable cannot be located."""


class CommandFailureError(PlatformToolsError):
    """Raised when a platform tool command exits non-zero or returns garbage."""


class UnlockBootloaderError(PlatformToolsError):
    """Raised when the bootloader could not be unlocked."""


class LockBootloaderError(PlatformToolsError):
    """Raised when the bootloader could not be locked."""


class RebootFailureError(PlatformToolsError):
    """Raised when a device reboot command fails."""
