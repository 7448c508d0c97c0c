"""Protocol definition for device discovery."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from uhkupdate.firmware.models import DeviceVariant


@runtime_checkable
class DeviceDiscoveryProtocol(Protocol):
    """Protocol for finding the attached keyboard variant."""

    def discover_device_variant(self) -> "DeviceVariant":
        """Return the variant of the single attached compatible keyboard.

        Returns:
            DeviceVariant bound to the attached device

        Raises:
            DiscoveryError: If no compatible keyboard, or more than one, is attached
        """
        ...

    def list_devices(self) -> list["DeviceVariant"]:
        """List all attached compatible keyboards.

        Returns:
            List of DeviceVariant objects, possibly empty
        """
        ...
