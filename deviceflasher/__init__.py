"""Flash factory images onto Android devices via adb and fastboot."""

__version__ = "0.1.0"
