from .errors import (
    ConfigError,
    DeviceOperationError,
    DiscoveryError,
    FlashError,
    PreconditionError,
    ResolutionError,
    UhkUpdateError,
    USBError,
)
from .logging import get_logger, setup_logging


__all__ = [
    "setup_logging",
    "get_logger",
    "UhkUpdateError",
    "ConfigError",
    "DiscoveryError",
    "ResolutionError",
    "PreconditionError",
    "DeviceOperationError",
    "USBError",
    "FlashError",
]
