"""External bootloader tool invocation for firmware images."""

import shutil
import subprocess
from enum import Enum
from pathlib import Path

from uhkupdate.config.models import FlasherConfig
from uhkupdate.core.errors import ConfigError, FlashError
from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.firmware.models import DeviceVariant


class FlashTarget(str, Enum):
    """Which part of the keyboard an image is written to."""

    RIGHT = "right"
    LEFT = "left"


class CommandFlasher(StructlogMixin):
    """Flashes images by running the configured bootloader tool.

    The tool is an argv template taken from FlasherConfig; no shell is
    involved.
    """

    def __init__(self, config: FlasherConfig) -> None:
        super().__init__()
        self.config = config

    def _template(self, target: FlashTarget) -> list[str]:
        if target is FlashTarget.RIGHT:
            return list(self.config.right_command)
        return list(self.config.left_command)

    def check_available(self) -> None:
        """Ensure both commands are configured and their programs exist.

        Raises:
            ConfigError: If a command is unset or its program is not found
        """
        for target in FlashTarget:
            template = self._template(target)
            if not template:
                raise ConfigError(
                    f"No flash command configured for the {target.value} side "
                    f"(flasher.{target.value}_command)"
                )
            program = template[0]
            if shutil.which(program) is None and not Path(program).is_file():
                raise ConfigError(
                    f"Flash program for the {target.value} side not found: {program}"
                )

    def build_command(
        self, target: FlashTarget, image_path: Path, variant: DeviceVariant
    ) -> list[str]:
        """Substitute placeholders into the argv template for ``target``."""
        template = self._template(target)
        if not template:
            raise FlashError(f"No flash command configured for the {target.value} side")

        values = {
            "image": str(image_path),
            "variant": variant.name,
            "vendor_id": f"0x{variant.vendor_id:04x}",
            "product_id": f"0x{variant.keyboard_product_id:04x}",
            "bootloader_product_id": f"0x{variant.bootloader_product_id:04x}",
        }
        try:
            return [part.format(**values) for part in template]
        except (KeyError, IndexError, ValueError) as e:
            raise FlashError(
                f"Invalid placeholder in {target.value} flash command: {e}"
            ) from e

    def flash(
        self, target: FlashTarget, image_path: Path, variant: DeviceVariant
    ) -> None:
        """Write ``image_path`` to ``target`` and wait for the tool to finish.

        Raises:
            FlashError: If the tool cannot run, times out or exits non-zero
        """
        command = self.build_command(target, image_path, variant)
        log = self.logger.bind(target=target.value, image=str(image_path))
        log.info("flash_command_started", command=command)

        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise FlashError(f"Flash program not found: {command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise FlashError(
                f"Flashing the {target.value} side timed out after "
                f"{self.config.timeout:g}s"
            ) from e
        except OSError as e:
            raise FlashError(f"Cannot run flash program {command[0]}: {e}") from e

        if completed.stdout:
            log.debug("flash_command_output", stdout=completed.stdout.strip())

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            message = (
                f"Flashing the {target.value} side failed "
                f"(exit code {completed.returncode})"
            )
            if detail:
                message = f"{message}: {detail}"
            raise FlashError(message, {"returncode": completed.returncode})

        log.info("flash_command_completed")


def create_command_flasher(config: FlasherConfig) -> CommandFlasher:
    """Create a CommandFlasher instance."""
    return CommandFlasher(config)
