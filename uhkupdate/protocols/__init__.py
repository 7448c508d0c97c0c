"""Protocol definitions for type-safe interfaces."""

from .device_discovery_protocol import DeviceDiscoveryProtocol
from .device_operations_protocol import DeviceOperationsProtocol


__all__ = [
    "DeviceDiscoveryProtocol",
    "DeviceOperationsProtocol",
]
