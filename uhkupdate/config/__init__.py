"""Configuration package for uhkupdate."""

from .models import DeviceConfig, FlasherConfig, UpdateConfig, UserConfigData
from .user_config import UserConfig, create_user_config


__all__ = [
    "DeviceConfig",
    "FlasherConfig",
    "UpdateConfig",
    "UserConfig",
    "UserConfigData",
    "create_user_config",
]
