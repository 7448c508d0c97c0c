"""UHK device operations over the HID command protocol.

Configuration writes and keymap switching speak the keyboard's USB command
set directly. Firmware images are written by an external bootloader tool
(see ``CommandFlasher``); the HID handle is released while it runs and
reopened on the next command.
"""

import secrets
import struct
import time
from collections.abc import Callable, Iterator
from enum import IntEnum
from pathlib import Path
from types import TracebackType

from uhkupdate.config.models import UserConfigData
from uhkupdate.core.errors import ConfigError, DeviceOperationError, USBError
from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.device.flasher import CommandFlasher, FlashTarget, create_command_flasher
from uhkupdate.device.transport import REPORT_SIZE, HidTransport, create_hid_transport
from uhkupdate.firmware.models import DeviceVariant


class UsbCommand(IntEnum):
    GET_DEVICE_PROPERTY = 0x00
    REENUMERATE = 0x01
    WRITE_HARDWARE_CONFIG = 0x05
    WRITE_STAGING_USER_CONFIG = 0x06
    APPLY_CONFIG = 0x07
    LAUNCH_EEPROM_TRANSFER = 0x08
    GET_DEVICE_STATE = 0x09
    SWITCH_KEYMAP = 0x11


class ConfigBufferId(IntEnum):
    HARDWARE = 0
    STAGING_USER = 1
    VALIDATED_USER = 2


class EepromOperation(IntEnum):
    READ = 0
    WRITE = 1


class EnumerationMode(IntEnum):
    BOOTLOADER = 0
    BUSPAL = 1
    NORMAL_KEYBOARD = 2
    COMPATIBLE_KEYBOARD = 3


# [command, length, offset (u16 LE)] precedes each chunk
CHUNK_HEADER_SIZE = 4
MAX_CHUNK_SIZE = REPORT_SIZE - CHUNK_HEADER_SIZE
MAX_CONFIG_SIZE = 0xFFFF

HARDWARE_CONFIG_SIZE = 64
HARDWARE_CONFIG_SIGNATURE = b"UHK"
HARDWARE_CONFIG_VERSION = (1, 0, 0)
UHK_BRAND_ID = 0

BOOTLOADER_TIMEOUT_MS = 5000

# GetDeviceState response: [status, eeprom_busy, ...]
EEPROM_BUSY_INDEX = 1


def iter_config_chunks(
    data: bytes, chunk_size: int = MAX_CHUNK_SIZE
) -> Iterator[tuple[int, bytes]]:
    """Yield (offset, chunk) pairs covering ``data`` in order."""
    for offset in range(0, len(data), chunk_size):
        yield offset, data[offset : offset + chunk_size]


def encode_hardware_config(
    device_id: int,
    is_iso: bool,
    unique_id: int,
    brand_id: int = UHK_BRAND_ID,
    is_vendor_mode_on: bool = False,
) -> bytes:
    """Serialize the hardware configuration block.

    Layout: signature, major/minor/patch version, brand id, device id,
    unique id (u32 LE), vendor mode flag, ISO flag, zero padding.
    """
    body = struct.pack(
        "<3sBBBBBIBB",
        HARDWARE_CONFIG_SIGNATURE,
        *HARDWARE_CONFIG_VERSION,
        brand_id,
        device_id,
        unique_id,
        int(is_vendor_mode_on),
        int(is_iso),
    )
    return body.ljust(HARDWARE_CONFIG_SIZE, b"\x00")


class UhkDeviceOperations(StructlogMixin):
    """DeviceOperationsProtocol implementation for UHK keyboards."""

    def __init__(
        self,
        transport: HidTransport,
        flasher: CommandFlasher,
        eeprom_poll_interval: float = 0.1,
        eeprom_timeout: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        unique_id_factory: Callable[[], int] = lambda: secrets.randbits(32),
    ) -> None:
        super().__init__()
        self.transport = transport
        self.flasher = flasher
        self.eeprom_poll_interval = eeprom_poll_interval
        self.eeprom_timeout = eeprom_timeout
        self._sleep = sleep
        self._clock = clock
        self._unique_id_factory = unique_id_factory
        self._variant: DeviceVariant | None = None

    def __enter__(self) -> "UhkDeviceOperations":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """Acquire the keyboard if it is attached in keyboard mode.

        A keyboard sitting in bootloader mode has no command interface; the
        handle is then opened once it comes back after flashing.
        """
        path = self.transport.find_keyboard()
        if path is not None:
            self.transport.open(path)
        else:
            self.logger.debug("keyboard_interface_absent_deferring_open")

    def close(self) -> None:
        self.transport.close()

    def flash_right_unit(self, image_path: Path, variant: DeviceVariant) -> None:
        """Reboot the right unit into its bootloader and flash ``image_path``."""
        self._variant = variant
        if not variant.bootloader_mode:
            self._reenumerate_to_bootloader()
        self.transport.close()
        self.flasher.flash(FlashTarget.RIGHT, image_path, variant)

    def flash_left_module(self, image_path: Path, variant: DeviceVariant) -> None:
        """Flash the left half through the right unit."""
        self._variant = variant
        self.transport.close()
        self.flasher.flash(FlashTarget.LEFT, image_path, variant)

    def write_user_configuration(self, data: bytes) -> None:
        """Upload, apply and persist a binary user configuration."""
        if not data:
            raise DeviceOperationError("User configuration is empty")
        if len(data) > MAX_CONFIG_SIZE:
            raise DeviceOperationError(
                f"User configuration of {len(data)} bytes exceeds "
                f"{MAX_CONFIG_SIZE} bytes"
            )

        self._write_buffer(UsbCommand.WRITE_STAGING_USER_CONFIG, data)
        self.transport.command(bytes([UsbCommand.APPLY_CONFIG]))
        self._launch_eeprom_write(ConfigBufferId.VALIDATED_USER)
        self.logger.info("user_configuration_written", size=len(data))

    def write_hardware_configuration(self, is_iso: bool) -> None:
        """Write the hardware configuration block with the given layout flag."""
        if self._variant is None:
            raise DeviceOperationError(
                "Device variant is unknown; the right unit must be flashed first"
            )
        data = encode_hardware_config(
            device_id=self._variant.id,
            is_iso=is_iso,
            unique_id=self._unique_id_factory(),
        )
        self._write_buffer(UsbCommand.WRITE_HARDWARE_CONFIG, data)
        self._launch_eeprom_write(ConfigBufferId.HARDWARE)
        self.logger.info("hardware_configuration_written", is_iso=is_iso)

    def switch_keymap(self, keymap_id: str) -> None:
        """Activate the keymap with abbreviation ``keymap_id``."""
        try:
            encoded = keymap_id.encode("ascii")
        except UnicodeEncodeError as e:
            raise DeviceOperationError(
                f"Keymap abbreviation must be ASCII: {keymap_id!r}"
            ) from e
        if not encoded or len(encoded) > REPORT_SIZE - 2:
            raise DeviceOperationError(
                f"Keymap abbreviation has invalid length: {keymap_id!r}"
            )

        self.transport.command(
            bytes([UsbCommand.SWITCH_KEYMAP, len(encoded)]) + encoded
        )
        self.logger.info("keymap_switched", keymap=keymap_id)

    def _reenumerate_to_bootloader(self) -> None:
        payload = bytes([UsbCommand.REENUMERATE, EnumerationMode.BOOTLOADER])
        payload += struct.pack("<I", BOOTLOADER_TIMEOUT_MS)
        # The device drops off the bus without answering
        self.transport.send(payload)
        self.logger.debug("reenumerate_requested", mode="bootloader")

    def _write_buffer(self, command: UsbCommand, data: bytes) -> None:
        for offset, chunk in iter_config_chunks(data):
            header = bytes([command, len(chunk)]) + struct.pack("<H", offset)
            self.transport.command(header + chunk)

    def _launch_eeprom_write(self, buffer_id: ConfigBufferId) -> None:
        self.transport.command(
            bytes([UsbCommand.LAUNCH_EEPROM_TRANSFER, EepromOperation.WRITE, buffer_id])
        )
        self._wait_for_eeprom()

    def _wait_for_eeprom(self) -> None:
        deadline = self._clock() + self.eeprom_timeout
        while True:
            state = self.transport.command(bytes([UsbCommand.GET_DEVICE_STATE]))
            if state[EEPROM_BUSY_INDEX] == 0:
                return
            if self._clock() >= deadline:
                raise USBError(
                    f"EEPROM transfer did not finish within {self.eeprom_timeout:g}s"
                )
            self._sleep(self.eeprom_poll_interval)


def create_uhk_device_operations(config: UserConfigData) -> UhkDeviceOperations:
    """Create device operations from user configuration.

    Raises:
        ConfigError: If the flash commands are not configured
    """
    if not config.flasher.is_configured():
        raise ConfigError(
            "Flash commands are not configured; set flasher.right_command and "
            "flasher.left_command"
        )
    flasher = create_command_flasher(config.flasher)
    flasher.check_available()
    return UhkDeviceOperations(
        transport=create_hid_transport(config.device),
        flasher=flasher,
        eeprom_poll_interval=config.device.eeprom_poll_interval,
        eeprom_timeout=config.device.eeprom_timeout,
    )
