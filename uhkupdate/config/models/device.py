"""Device, flasher and update configuration models."""

from pydantic import BaseModel, Field, field_validator


class DeviceConfig(BaseModel):
    """HID transport settings."""

    command_timeout_ms: int = Field(
        default=2000, ge=1, description="Read timeout for one HID command in ms"
    )
    reconnect_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for the keyboard to re-enumerate after flashing",
    )
    reconnect_poll_interval: float = Field(
        default=0.5, gt=0, description="Polling interval while waiting to reconnect"
    )
    eeprom_poll_interval: float = Field(
        default=0.1, gt=0, description="Polling interval while the EEPROM is busy"
    )
    eeprom_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for an EEPROM transfer"
    )


class FlasherConfig(BaseModel):
    """External bootloader tool invocation.

    Commands are argv templates. Placeholders: {image}, {variant},
    {vendor_id}, {product_id}, {bootloader_product_id}.
    """

    right_command: list[str] = Field(
        default_factory=list,
        description="argv template that flashes the right unit firmware",
    )
    left_command: list[str] = Field(
        default_factory=list,
        description="argv template that flashes the left module firmware",
    )
    timeout: float = Field(
        default=300.0, gt=0, description="Timeout in seconds for one flash command"
    )

    @field_validator("right_command", "left_command", mode="before")
    @classmethod
    def split_command_string(cls, v: object) -> object:
        """Accept a shell-like string as well as a list."""
        if isinstance(v, str):
            import shlex

            return shlex.split(v)
        return v

    def is_configured(self) -> bool:
        """Both flash commands are set."""
        return bool(self.right_command) and bool(self.left_command)


class UpdateConfig(BaseModel):
    """Defaults for the update run itself."""

    keymap: str = Field(
        default="TES",
        min_length=1,
        max_length=32,
        description="Abbreviation of the keymap activated after the update",
    )
