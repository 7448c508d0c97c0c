"""HID transport for the keyboard command interface."""

import time
from collections.abc import Callable
from typing import Any

import hid

from uhkupdate.config.models import DeviceConfig
from uhkupdate.core.errors import USBError, create_usb_error
from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.device.registry import COMMAND_INTERFACE_NUMBER, KNOWN_VARIANTS


REPORT_SIZE = 64
REPORT_ID = 0x00
STATUS_SUCCESS = 0


def _find_keyboard_path(entries: list[dict[str, Any]]) -> bytes | None:
    for info in entries:
        if info.get("interface_number", -1) not in (COMMAND_INTERFACE_NUMBER, -1):
            continue
        for variant in KNOWN_VARIANTS:
            if (
                info.get("vendor_id") == variant.vendor_id
                and info.get("product_id") == variant.keyboard_product_id
            ):
                return info.get("path")
    return None


class HidTransport(StructlogMixin):
    """Request/response exchange with the keyboard over 64-byte HID reports.

    The device is opened lazily; after a flash the keyboard re-enumerates,
    so ``close`` followed by ``open`` waits for it to come back.
    """

    def __init__(
        self,
        config: DeviceConfig | None = None,
        device_factory: Callable[[], Any] = hid.device,
        enumerate_devices: Callable[[], list[dict[str, Any]]] = hid.enumerate,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.config = config or DeviceConfig()
        self._device_factory = device_factory
        self._enumerate = enumerate_devices
        self._sleep = sleep
        self._clock = clock
        self._device: Any = None
        self._path: bytes | None = None

    @property
    def is_open(self) -> bool:
        return self._device is not None

    @property
    def target(self) -> str:
        if self._path is None:
            return "keyboard"
        return self._path.decode(errors="replace")

    def open(self, path: bytes | None = None) -> None:
        """Open the keyboard command interface.

        Args:
            path: HID path to open; when omitted, waits for a known keyboard
                to appear for up to the configured reconnect timeout

        Raises:
            USBError: If no keyboard appears or it cannot be opened
        """
        if self.is_open:
            return

        if path is None:
            path = self.wait_for_keyboard()

        device = self._device_factory()
        try:
            device.open_path(path)
        except (OSError, ValueError) as e:
            raise create_usb_error(
                path.decode(errors="replace"), "open", e
            ) from e

        self._device = device
        self._path = path
        self.logger.debug("hid_device_opened", path=self.target)

    def find_keyboard(self) -> bytes | None:
        """Return the HID path of an attached keyboard, or None."""
        try:
            return _find_keyboard_path(self._enumerate())
        except (OSError, ValueError) as e:
            raise create_usb_error("keyboard", "enumerate", e) from e

    def wait_for_keyboard(self) -> bytes:
        """Poll HID enumeration until a known keyboard is present."""
        deadline = self._clock() + self.config.reconnect_timeout
        while True:
            path = self.find_keyboard()
            if path is not None:
                return path
            if self._clock() >= deadline:
                raise USBError(
                    "Keyboard did not appear within "
                    f"{self.config.reconnect_timeout:g}s"
                )
            self._sleep(self.config.reconnect_poll_interval)

    def close(self) -> None:
        """Close the device if open. Safe to call repeatedly."""
        if self._device is None:
            return
        device, self._device = self._device, None
        try:
            device.close()
        except OSError as e:
            raise create_usb_error(self.target, "close", e) from e
        finally:
            self.logger.debug("hid_device_closed", path=self.target)

    def send(self, payload: bytes) -> None:
        """Write one report without waiting for a response."""
        if len(payload) > REPORT_SIZE:
            raise USBError(
                f"Report payload of {len(payload)} bytes exceeds {REPORT_SIZE}"
            )
        if self._device is None:
            self.open()

        report = [REPORT_ID, *payload, *([0] * (REPORT_SIZE - len(payload)))]
        try:
            written = self._device.write(report)
        except (OSError, ValueError) as e:
            raise create_usb_error(self.target, "write", e) from e
        if written is not None and written < 0:
            raise create_usb_error(self.target, "write", "device rejected the report")

    def command(self, payload: bytes) -> bytes:
        """Write one report and return the device's response.

        Raises:
            USBError: On timeout or a non-zero status byte
        """
        if not payload:
            raise USBError("Empty command payload")
        self.send(payload)
        try:
            response = self._device.read(REPORT_SIZE, self.config.command_timeout_ms)
        except (OSError, ValueError) as e:
            raise create_usb_error(self.target, "read", e) from e

        if not response:
            raise create_usb_error(
                self.target,
                "read",
                f"no response within {self.config.command_timeout_ms}ms",
                {"command": payload[0] if payload else None},
            )

        data = bytes(response)
        if data[0] != STATUS_SUCCESS:
            raise create_usb_error(
                self.target,
                "command",
                f"device returned status {data[0]} for command 0x{payload[0]:02x}",
                {"status": data[0]},
            )
        return data


def create_hid_transport(config: DeviceConfig | None = None) -> HidTransport:
    """Create a HidTransport instance."""
    return HidTransport(config)
