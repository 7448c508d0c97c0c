"""Tests for HID device discovery."""

from unittest.mock import patch

import pytest

from uhkupdate.core.errors import DiscoveryError
from uhkupdate.device.discovery import HidDeviceDiscovery, create_device_discovery
from uhkupdate.device.registry import (
    UHK60_V1_RIGHT,
    UHK60_V2_RIGHT,
    UHK_VENDOR_ID,
    get_variant_by_name,
    get_variant_by_usb_id,
    match_usb_id,
    variant_names,
)
from uhkupdate.protocols import DeviceDiscoveryProtocol


def hid_entry(product_id, path=b"1-1:1.0", interface=0, serial="SN1", vendor=UHK_VENDOR_ID):
    return {
        "vendor_id": vendor,
        "product_id": product_id,
        "path": path,
        "interface_number": interface,
        "serial_number": serial,
        "product_string": "UHK",
    }


class TestRegistry:
    """Test the known variant registry."""

    def test_lookup_by_name(self):
        assert get_variant_by_name("uhk60v2-right") == UHK60_V2_RIGHT
        assert get_variant_by_name("uhk80-right") is None

    def test_lookup_by_usb_id(self):
        assert get_variant_by_usb_id(UHK_VENDOR_ID, 0x6122) == UHK60_V1_RIGHT
        assert get_variant_by_usb_id(UHK_VENDOR_ID, 0x6123) is None

    def test_match_bootloader_id(self):
        assert match_usb_id(UHK_VENDOR_ID, 0x6123) == (UHK60_V2_RIGHT, True)
        assert match_usb_id(UHK_VENDOR_ID, 0x6124) == (UHK60_V2_RIGHT, False)
        assert match_usb_id(0x1234, 0x6124) is None

    def test_variant_ids_match_manifest_device_ids(self):
        assert UHK60_V1_RIGHT.id == 1
        assert UHK60_V2_RIGHT.id == 2
        assert variant_names() == ["uhk60-right", "uhk60v2-right"]


class TestHidDeviceDiscovery:
    """Test HidDeviceDiscovery."""

    def test_implements_protocol(self):
        assert isinstance(create_device_discovery(), DeviceDiscoveryProtocol)

    def test_single_keyboard(self):
        entries = [hid_entry(0x6124, path=b"1-2:1.0", serial="ABC")]

        with patch("uhkupdate.device.discovery.hid.enumerate", return_value=entries):
            variant = HidDeviceDiscovery().discover_device_variant()

        assert variant.name == "uhk60v2-right"
        assert variant.hid_path == b"1-2:1.0"
        assert variant.serial_number == "ABC"
        assert not variant.bootloader_mode

    def test_keyboard_in_bootloader(self):
        entries = [hid_entry(0x6120, serial="")]

        with patch("uhkupdate.device.discovery.hid.enumerate", return_value=entries):
            variant = HidDeviceDiscovery().discover_device_variant()

        assert variant.name == "uhk60-right"
        assert variant.bootloader_mode
        assert variant.serial_number is None

    def test_ignores_other_interfaces_and_vendors(self):
        entries = [
            hid_entry(0x6124, path=b"1-2:1.1", interface=1),
            hid_entry(0x6124, path=b"1-2:1.2", interface=2),
            hid_entry(0x6124, path=b"other", vendor=0x046D),
            hid_entry(0x6124, path=b"1-2:1.0", interface=0),
        ]

        with patch("uhkupdate.device.discovery.hid.enumerate", return_value=entries):
            devices = HidDeviceDiscovery().list_devices()

        assert [device.hid_path for device in devices] == [b"1-2:1.0"]

    def test_unknown_interface_number_accepted(self):
        entries = [hid_entry(0x6124, interface=-1)]

        with patch("uhkupdate.device.discovery.hid.enumerate", return_value=entries):
            devices = HidDeviceDiscovery().list_devices()

        assert len(devices) == 1

    def test_duplicate_entries_collapsed(self):
        entries = [hid_entry(0x6124), hid_entry(0x6124)]

        with patch("uhkupdate.device.discovery.hid.enumerate", return_value=entries):
            devices = HidDeviceDiscovery().list_devices()

        assert len(devices) == 1

    def test_no_keyboard(self):
        with (
            patch("uhkupdate.device.discovery.hid.enumerate", return_value=[]),
            pytest.raises(DiscoveryError, match="No compatible keyboard"),
        ):
            HidDeviceDiscovery().discover_device_variant()

    def test_several_keyboards(self):
        entries = [
            hid_entry(0x6122, path=b"1-1:1.0"),
            hid_entry(0x6124, path=b"1-2:1.0"),
        ]

        with (
            patch("uhkupdate.device.discovery.hid.enumerate", return_value=entries),
            pytest.raises(DiscoveryError, match="More than one keyboard"),
        ):
            HidDeviceDiscovery().discover_device_variant()

    def test_enumeration_failure(self):
        with (
            patch(
                "uhkupdate.device.discovery.hid.enumerate",
                side_effect=OSError("hidapi init failed"),
            ),
            pytest.raises(DiscoveryError, match="Cannot enumerate"),
        ):
            HidDeviceDiscovery().list_devices()
