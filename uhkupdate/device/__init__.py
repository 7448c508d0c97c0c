"""Keyboard access over HID and the external bootloader tool."""

from .discovery import HidDeviceDiscovery, create_device_discovery
from .flasher import CommandFlasher, FlashTarget, create_command_flasher
from .operations import UhkDeviceOperations, create_uhk_device_operations
from .registry import KNOWN_VARIANTS, get_variant_by_name, variant_names
from .transport import HidTransport, create_hid_transport


__all__ = [
    "CommandFlasher",
    "FlashTarget",
    "HidDeviceDiscovery",
    "HidTransport",
    "KNOWN_VARIANTS",
    "UhkDeviceOperations",
    "create_command_flasher",
    "create_device_discovery",
    "create_hid_transport",
    "create_uhk_device_operations",
    "get_variant_by_name",
    "variant_names",
]
