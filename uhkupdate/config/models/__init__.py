"""Configuration models."""

from .device import DeviceConfig, FlasherConfig, UpdateConfig
from .user import UserConfigData


__all__ = ["DeviceConfig", "FlasherConfig", "UpdateConfig", "UserConfigData"]
