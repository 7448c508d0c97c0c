"""Error types for uhkupdate.

Every error raised by the update pipeline derives from ``UhkUpdateError``.
Subclasses mirror the stage that failed so the top-level run can report
which stage it was without inspecting messages.
"""

from typing import Any


class UhkUpdateError(Exception):
    """Base class for all uhkupdate errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(UhkUpdateError):
    """Invalid or incomplete user configuration."""


class DiscoveryError(UhkUpdateError):
    """No compatible device is attached, or the attached set is ambiguous."""


class ResolutionError(UhkUpdateError):
    """Firmware bundle or manifest cannot be resolved for the attached variant."""


class PreconditionError(UhkUpdateError):
    """A required artifact is missing or a CLI input is out of range."""

    def __init__(
        self, check: str, message: str, context: dict[str, Any] | None = None
    ):
        super().__init__(message, context)
        self.check = check


class DeviceOperationError(UhkUpdateError):
    """A device-mutating operation failed."""


class USBError(DeviceOperationError):
    """HID transport failure: open, write, read or device-reported status."""


class FlashError(DeviceOperationError):
    """External bootloader tool failed to flash an image."""


def create_usb_error(
    target: str,
    operation: str,
    original_error: Exception | str,
    context: dict[str, Any] | None = None,
) -> USBError:
    """Build a USBError with a consistent message format.

    Args:
        target: Device path or description the operation ran against
        operation: Name of the transport operation
        original_error: Underlying exception or reason
        context: Extra details for logging

    Returns:
        USBError instance ready to raise
    """
    details = {"target": target, "operation": operation}
    if context:
        details.update(context)
    return USBError(
        f"USB device operation '{operation}' failed on '{target}': {original_error}",
        details,
    )


__all__ = [
    "ConfigError",
    "DeviceOperationError",
    "DiscoveryError",
    "FlashError",
    "PreconditionError",
    "ResolutionError",
    "USBError",
    "UhkUpdateError",
    "create_usb_error",
]
