"""Shared fixtures for uhkupdate tests."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from uhkupdate.device.registry import UHK60_V1_RIGHT, UHK60_V2_RIGHT
from uhkupdate.firmware.models import DeviceVariant
from uhkupdate.protocols import DeviceDiscoveryProtocol, DeviceOperationsProtocol


RIGHT_IMAGE = b":020000040000FA\n:00000001FF\n"
LEFT_IMAGE = b"\x00\x10\x00\x20" * 64
USER_CONFIG = bytes(range(256)) * 2

BundleFactory = Callable[..., Path]


def write_bundle(
    root: Path,
    devices: list[tuple[int, str]] | None = None,
    omit: tuple[str, ...] = (),
    empty: tuple[str, ...] = (),
) -> Path:
    """Write a firmware bundle directory.

    Args:
        root: Directory to create
        devices: (deviceId, name) manifest entries; both UHK 60 variants if None
        omit: Parts to leave out: "manifest", "right", "left", "config"
        empty: Parts to write as empty files
    """
    devices = devices or [(1, "uhk60-right"), (2, "uhk60v2-right")]
    root.mkdir(parents=True, exist_ok=True)

    if "manifest" not in omit:
        manifest = {
            "name": "uhk-firmware",
            "version": "9.0.0",
            "devices": [
                {"deviceId": device_id, "name": name, "userConfigVersion": "6.0.0"}
                for device_id, name in devices
            ],
            "modules": [{"moduleId": 2, "name": "uhk60-left"}],
            "gitInfo": {"repo": "UltimateHackingKeyboard/firmware", "tag": "v9.0.0"},
        }
        (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")

    parts = {
        "right": [root / "devices" / name / "firmware.hex" for _, name in devices],
        "left": [root / "modules" / "uhk60-left.bin"],
        "config": [root / "devices" / "uhk60-right" / "config.bin"],
    }
    contents = {"right": RIGHT_IMAGE, "left": LEFT_IMAGE, "config": USER_CONFIG}
    for part, paths in parts.items():
        if part in omit:
            continue
        for path in paths:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"" if part in empty else contents[part])

    return root


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Keep user config files and UHK_UPDATE_* variables out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("UHK_UPDATE_"):
            monkeypatch.delenv(key)

    work_dir = tmp_path / "cwd"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return work_dir


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def bundle_factory(tmp_path: Path) -> BundleFactory:
    """Factory writing bundles below tmp_path."""

    def factory(name: str = "bundle", **kwargs: object) -> Path:
        return write_bundle(tmp_path / name, **kwargs)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def bundle_dir(bundle_factory: BundleFactory) -> Path:
    """A complete bundle directory for both UHK 60 variants."""
    return bundle_factory()


@pytest.fixture
def v1_variant() -> DeviceVariant:
    return UHK60_V1_RIGHT.with_connection(hid_path=b"1-1:1.0", serial_number="V1")


@pytest.fixture
def v2_variant() -> DeviceVariant:
    return UHK60_V2_RIGHT.with_connection(hid_path=b"1-2:1.0", serial_number="V2")


@pytest.fixture
def mock_operations() -> Mock:
    """Device operations mock recording every call."""
    return Mock(spec=DeviceOperationsProtocol)


@pytest.fixture
def mock_discovery(v2_variant: DeviceVariant) -> Mock:
    """Discovery mock that finds one UHK 60 v2."""
    discovery = Mock(spec=DeviceDiscoveryProtocol)
    discovery.discover_device_variant.return_value = v2_variant
    discovery.list_devices.return_value = [v2_variant]
    return discovery
