"""HID-based device discovery."""

from typing import Any

import hid

from uhkupdate.core.errors import DiscoveryError
from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.device.registry import COMMAND_INTERFACE_NUMBER, match_usb_id
from uhkupdate.firmware.models import DeviceVariant


def _is_command_interface(info: dict[str, Any]) -> bool:
    # hidapi reports -1 where the backend does not expose interface numbers
    return info.get("interface_number", -1) in (COMMAND_INTERFACE_NUMBER, -1)


class HidDeviceDiscovery(StructlogMixin):
    """Finds attached keyboards by enumerating HID devices.

    Implements DeviceDiscoveryProtocol.
    """

    def list_devices(self) -> list[DeviceVariant]:
        """List attached keyboards, one entry per physical device."""
        try:
            entries = hid.enumerate()
        except (OSError, ValueError) as e:
            raise DiscoveryError(f"Cannot enumerate HID devices: {e}") from e

        devices: list[DeviceVariant] = []
        seen: set[bytes] = set()
        for info in entries:
            match = match_usb_id(info.get("vendor_id", 0), info.get("product_id", 0))
            if match is None or not _is_command_interface(info):
                continue

            path = info.get("path") or b""
            if path in seen:
                continue
            seen.add(path)

            variant, bootloader_mode = match
            devices.append(
                variant.with_connection(
                    hid_path=path,
                    serial_number=info.get("serial_number"),
                    bootloader_mode=bootloader_mode,
                )
            )
            self.logger.debug(
                "keyboard_found",
                variant=variant.name,
                bootloader_mode=bootloader_mode,
                path=path.decode(errors="replace"),
            )

        return devices

    def discover_device_variant(self) -> DeviceVariant:
        """Return the single attached keyboard.

        Raises:
            DiscoveryError: If none, or more than one, is attached
        """
        devices = self.list_devices()
        if not devices:
            raise DiscoveryError("No compatible keyboard is attached")
        if len(devices) > 1:
            names = ", ".join(device.display_name for device in devices)
            raise DiscoveryError(
                f"More than one keyboard is attached ({names}); connect only one"
            )

        device = devices[0]
        self.logger.info(
            "keyboard_discovered",
            variant=device.name,
            bootloader_mode=device.bootloader_mode,
        )
        return device


def create_device_discovery() -> HidDeviceDiscovery:
    """Create a HidDeviceDiscovery instance."""
    return HidDeviceDiscovery()
