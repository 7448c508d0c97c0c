"""Tests for the external bootloader tool invocation."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from uhkupdate.config.models import FlasherConfig
from uhkupdate.core.errors import ConfigError, FlashError
from uhkupdate.device.flasher import CommandFlasher, FlashTarget, create_command_flasher


@pytest.fixture
def flasher_config():
    return FlasherConfig(
        right_command=[
            "uhk-flash",
            "--vid",
            "{vendor_id}",
            "--pid",
            "{bootloader_product_id}",
            "{image}",
        ],
        left_command="uhk-flash --module left --device {variant} {image}",
        timeout=60,
    )


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestFlasherConfig:
    """Test flasher configuration parsing."""

    def test_string_command_is_split(self, flasher_config):
        assert flasher_config.left_command == [
            "uhk-flash",
            "--module",
            "left",
            "--device",
            "{variant}",
            "{image}",
        ]

    def test_is_configured(self, flasher_config):
        assert flasher_config.is_configured()
        assert not FlasherConfig(right_command=["x"]).is_configured()


class TestBuildCommand:
    """Test placeholder substitution."""

    def test_right_command(self, flasher_config, v2_variant):
        command = CommandFlasher(flasher_config).build_command(
            FlashTarget.RIGHT, Path("/fw/firmware.hex"), v2_variant
        )

        assert command == [
            "uhk-flash",
            "--vid",
            "0x1d50",
            "--pid",
            "0x6123",
            "/fw/firmware.hex",
        ]

    def test_left_command(self, flasher_config, v1_variant):
        command = CommandFlasher(flasher_config).build_command(
            FlashTarget.LEFT, Path("/fw/left.bin"), v1_variant
        )

        assert command[-2:] == ["uhk60-right", "/fw/left.bin"]

    def test_unknown_placeholder(self, v2_variant):
        flasher = CommandFlasher(FlasherConfig(right_command=["tool", "{serial}"]))

        with pytest.raises(FlashError, match="Invalid placeholder"):
            flasher.build_command(FlashTarget.RIGHT, Path("fw.hex"), v2_variant)

    def test_unconfigured_target(self, v2_variant):
        flasher = CommandFlasher(FlasherConfig(right_command=["tool"]))

        with pytest.raises(FlashError, match="No flash command configured"):
            flasher.build_command(FlashTarget.LEFT, Path("left.bin"), v2_variant)


class TestFlash:
    """Test running the flash tool."""

    def test_success(self, flasher_config, v2_variant):
        with patch(
            "uhkupdate.device.flasher.subprocess.run", return_value=completed(stdout="ok")
        ) as mock_run:
            create_command_flasher(flasher_config).flash(
                FlashTarget.RIGHT, Path("/fw/firmware.hex"), v2_variant
            )

        args, kwargs = mock_run.call_args
        assert args[0][-1] == "/fw/firmware.hex"
        assert kwargs["timeout"] == 60
        assert kwargs["check"] is False
        assert kwargs["capture_output"] is True

    def test_non_zero_exit(self, flasher_config, v2_variant):
        with (
            patch(
                "uhkupdate.device.flasher.subprocess.run",
                return_value=completed(returncode=2, stderr="device not found\n"),
            ),
            pytest.raises(FlashError, match=r"exit code 2\): device not found") as exc,
        ):
            CommandFlasher(flasher_config).flash(
                FlashTarget.LEFT, Path("left.bin"), v2_variant
            )

        assert exc.value.context["returncode"] == 2

    def test_timeout(self, flasher_config, v2_variant):
        with (
            patch(
                "uhkupdate.device.flasher.subprocess.run",
                side_effect=subprocess.TimeoutExpired(cmd="uhk-flash", timeout=60),
            ),
            pytest.raises(FlashError, match="timed out after 60s"),
        ):
            CommandFlasher(flasher_config).flash(
                FlashTarget.RIGHT, Path("fw.hex"), v2_variant
            )

    def test_program_missing(self, flasher_config, v2_variant):
        with (
            patch(
                "uhkupdate.device.flasher.subprocess.run",
                side_effect=FileNotFoundError(2, "No such file"),
            ),
            pytest.raises(FlashError, match="Flash program not found: uhk-flash"),
        ):
            CommandFlasher(flasher_config).flash(
                FlashTarget.RIGHT, Path("fw.hex"), v2_variant
            )


class TestCheckAvailable:
    """Test availability checks."""

    def test_program_on_path(self, flasher_config):
        with patch("uhkupdate.device.flasher.shutil.which", return_value="/usr/bin/x"):
            CommandFlasher(flasher_config).check_available()

    def test_program_missing(self, flasher_config):
        with (
            patch("uhkupdate.device.flasher.shutil.which", return_value=None),
            pytest.raises(ConfigError, match="not found: uhk-flash"),
        ):
            CommandFlasher(flasher_config).check_available()

    def test_command_missing(self):
        flasher = CommandFlasher(FlasherConfig(left_command=["tool"]))

        with pytest.raises(ConfigError, match="right side"):
            flasher.check_available()

