"""User configuration models."""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .device import DeviceConfig, FlasherConfig, UpdateConfig


VALID_ICON_MODES = ("emoji", "text")


class UserConfigData(BaseSettings):
    """User configuration data model with automatic environment variable support.

    Precedence order (highest to lowest):
    1. Environment variables (highest)
    2. Constructor arguments (file data)
    3. .env file
    4. Default values (lowest)
    """

    model_config = SettingsConfigDict(
        env_prefix="UHK_UPDATE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    log_level: str = "WARNING"

    icon_mode: str = Field(
        default="emoji", description="Icon display mode: 'emoji' or 'text'"
    )

    update: UpdateConfig = Field(default_factory=UpdateConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)
    flasher: FlasherConfig = Field(default_factory=FlasherConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v

    @field_validator("icon_mode")
    @classmethod
    def validate_icon_mode(cls, v: str) -> str:
        lower_v = v.strip().lower()
        if lower_v not in VALID_ICON_MODES:
            raise ValueError(f"Icon mode must be one of {list(VALID_ICON_MODES)}")
        return lower_v
