"""Protocol definition for device-mutating operations."""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from uhkupdate.firmware.models import DeviceVariant


@runtime_checkable
class DeviceOperationsProtocol(Protocol):
    """Atomic device-mutating primitives used by the update orchestrator.

    Every call blocks until the device confirms completion or the operation
    fails. Failures are raised as DeviceOperationError (or a subclass).
    Implementations own the USB handle between ``open()`` and ``close()``.
    """

    def open(self) -> None:
        """Acquire exclusive access to the device."""
        ...

    def close(self) -> None:
        """Release the device. Safe to call more than once."""
        ...

    def flash_right_unit(self, image_path: Path, variant: "DeviceVariant") -> None:
        """Flash the right unit firmware image.

        Raises:
            DeviceOperationError: On transport error or device rejection
        """
        ...

    def flash_left_module(self, image_path: Path, variant: "DeviceVariant") -> None:
        """Flash the left module firmware image.

        Raises:
            DeviceOperationError: On transport error or device rejection
        """
        ...

    def write_user_configuration(self, data: bytes) -> None:
        """Write and persist the user configuration blob.

        Raises:
            DeviceOperationError: On transport error or device rejection
        """
        ...

    def write_hardware_configuration(self, is_iso: bool) -> None:
        """Write and persist the hardware configuration.

        Raises:
            DeviceOperationError: On transport error or device rejection
        """
        ...

    def switch_keymap(self, keymap_id: str) -> None:
        """Activate the keymap with the given abbreviation.

        Raises:
            DeviceOperationError: On transport error or device rejection
        """
        ...
