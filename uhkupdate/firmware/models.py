"""Firmware update domain models."""

from enum import Enum, IntEnum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, model_validator

from uhkupdate.models.base import UhkBaseModel, UhkFrozenModel
from uhkupdate.models.results import BaseResult


class Layout(str, Enum):
    """Physical key layout written into the hardware configuration."""

    ANSI = "ansi"
    ISO = "iso"

    @property
    def is_iso(self) -> bool:
        return self is Layout.ISO


class DeviceVariant(UhkFrozenModel):
    """A keyboard product as attached to the host.

    ``id`` matches the ``deviceId`` used in firmware manifests. Connection
    fields are only filled in by discovery.
    """

    id: int
    name: str
    display_name: str
    vendor_id: int
    keyboard_product_id: int
    bootloader_product_id: int
    serial_number: str | None = None
    hid_path: bytes | None = Field(default=None, repr=False)
    bootloader_mode: bool = False

    def with_connection(
        self,
        hid_path: bytes | None,
        serial_number: str | None = None,
        bootloader_mode: bool = False,
    ) -> "DeviceVariant":
        """Return a copy bound to a concrete HID path."""
        return self.model_copy(
            update={
                "hid_path": hid_path,
                "serial_number": serial_number or None,
                "bootloader_mode": bootloader_mode,
            }
        )


class ManifestDevice(UhkBaseModel):
    """A device entry of the firmware manifest."""

    device_id: int = Field(alias="deviceId")
    name: str
    user_config_version: str | None = Field(default=None, alias="userConfigVersion")


class ManifestModule(UhkBaseModel):
    """A module entry of the firmware manifest."""

    module_id: int = Field(alias="moduleId")
    name: str


class FirmwareManifest(UhkBaseModel):
    """Parsed ``package.json`` of a firmware bundle."""

    name: str
    version: str
    devices: list[ManifestDevice] = Field(min_length=1)
    modules: list[ManifestModule] = Field(default_factory=list)
    git_info: dict[str, Any] | None = Field(default=None, alias="gitInfo")

    @property
    def compatible_device_ids(self) -> set[int]:
        return {device.device_id for device in self.devices}

    def find_device(self, device_id: int) -> ManifestDevice | None:
        """Find the manifest entry for a device id."""
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None


class ResolvedArtifacts(UhkFrozenModel):
    """Absolute artifact paths resolved for one bundle and one variant."""

    bundle_root: Path
    manifest: FirmwareManifest
    variant: DeviceVariant
    right_firmware_path: Path
    left_firmware_path: Path
    user_config_path: Path


class UpdateStep(str, Enum):
    """Device-mutating steps, declared in execution order."""

    RIGHT_FLASH = "right-flash"
    LEFT_FLASH = "left-flash"
    USER_CONFIG = "user-config"
    HARDWARE_CONFIG = "hardware-config"
    SWITCH_KEYMAP = "switch-keymap"

    @property
    def description(self) -> str:
        return STEP_DESCRIPTIONS[self]


STEP_DESCRIPTIONS = {
    UpdateStep.RIGHT_FLASH: "Flash right unit firmware",
    UpdateStep.LEFT_FLASH: "Flash left module firmware",
    UpdateStep.USER_CONFIG: "Write user configuration",
    UpdateStep.HARDWARE_CONFIG: "Write hardware configuration",
    UpdateStep.SWITCH_KEYMAP: "Switch active keymap",
}


class UpdateState(str, Enum):
    """Orchestrator states."""

    IDLE = "Idle"
    RIGHT_FLASHING = "RightFlashing"
    LEFT_FLASHING = "LeftFlashing"
    RESTORING_USER_CONFIG = "RestoringUserConfig"
    RESTORING_HARDWARE_CONFIG = "RestoringHardwareConfig"
    SWITCHING_KEYMAP = "SwitchingKeymap"
    DONE = "Done"
    FAILED = "Failed"


STEP_STATES = {
    UpdateStep.RIGHT_FLASH: UpdateState.RIGHT_FLASHING,
    UpdateStep.LEFT_FLASH: UpdateState.LEFT_FLASHING,
    UpdateStep.USER_CONFIG: UpdateState.RESTORING_USER_CONFIG,
    UpdateStep.HARDWARE_CONFIG: UpdateState.RESTORING_HARDWARE_CONFIG,
    UpdateStep.SWITCH_KEYMAP: UpdateState.SWITCHING_KEYMAP,
}


class FlashRightStep(UhkFrozenModel):
    step: Literal[UpdateStep.RIGHT_FLASH] = UpdateStep.RIGHT_FLASH
    image_path: Path


class FlashLeftStep(UhkFrozenModel):
    step: Literal[UpdateStep.LEFT_FLASH] = UpdateStep.LEFT_FLASH
    image_path: Path


class WriteUserConfigStep(UhkFrozenModel):
    step: Literal[UpdateStep.USER_CONFIG] = UpdateStep.USER_CONFIG
    config_path: Path


class WriteHardwareConfigStep(UhkFrozenModel):
    step: Literal[UpdateStep.HARDWARE_CONFIG] = UpdateStep.HARDWARE_CONFIG
    is_iso: bool


class SwitchKeymapStep(UhkFrozenModel):
    step: Literal[UpdateStep.SWITCH_KEYMAP] = UpdateStep.SWITCH_KEYMAP
    keymap: str


PlannedStep = Annotated[
    FlashRightStep
    | FlashLeftStep
    | WriteUserConfigStep
    | WriteHardwareConfigStep
    | SwitchKeymapStep,
    Field(discriminator="step"),
]


class UpdatePlan(UhkFrozenModel):
    """Ordered, immutable list of the steps of one update run."""

    steps: tuple[PlannedStep, ...]

    @model_validator(mode="after")
    def validate_step_order(self) -> "UpdatePlan":
        """Steps must appear exactly once each, in UpdateStep order."""
        if self.step_names != list(UpdateStep):
            names = [step.value for step in self.step_names]
            raise ValueError(f"Update plan steps out of order: {names}")
        return self

    @property
    def step_names(self) -> list[UpdateStep]:
        return [planned.step for planned in self.steps]


class UpdateResult(BaseResult):
    """Result of executing an update plan."""

    visited_states: list[UpdateState] = Field(default_factory=list)
    completed_steps: list[UpdateStep] = Field(default_factory=list)
    failed_step: UpdateStep | None = None
    cause: str | None = None


class PreconditionCheck(str, Enum):
    """Named precondition checks, declared in evaluation order."""

    RIGHT_FIRMWARE = "right-firmware"
    LEFT_FIRMWARE = "left-firmware"
    USER_CONFIG = "user-config"
    LAYOUT = "layout"


class PreconditionReport(BaseResult):
    """Outcome of precondition validation."""

    passed_checks: list[PreconditionCheck] = Field(default_factory=list)
    failed_check: PreconditionCheck | None = None
    layout: Layout | None = None


class FailureKind(str, Enum):
    DISCOVERY = "discovery"
    RESOLUTION = "resolution"
    PRECONDITION = "precondition"
    DEVICE = "device"
    CONFIG = "config"


class ExitCode(IntEnum):
    SUCCESS = 0
    PRECONDITION_FAILED = 1
    RESOLUTION_FAILED = 2
    DEVICE_FAILED = 3
    CONFIG_FAILED = 4


FAILURE_EXIT_CODES = {
    FailureKind.PRECONDITION: ExitCode.PRECONDITION_FAILED,
    FailureKind.DISCOVERY: ExitCode.RESOLUTION_FAILED,
    FailureKind.RESOLUTION: ExitCode.RESOLUTION_FAILED,
    FailureKind.DEVICE: ExitCode.DEVICE_FAILED,
    FailureKind.CONFIG: ExitCode.CONFIG_FAILED,
}


class RunOutcome(BaseResult):
    """Terminal outcome of a whole update run."""

    failure_kind: FailureKind | None = None
    failed_check: PreconditionCheck | None = None
    failed_step: UpdateStep | None = None
    cause: str | None = None
    variant: DeviceVariant | None = None
    artifacts: ResolvedArtifacts | None = None
    plan: UpdatePlan | None = None
    visited_states: list[UpdateState] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def exit_code(self) -> ExitCode:
        if self.failure_kind is None:
            return ExitCode.SUCCESS
        return FAILURE_EXIT_CODES[self.failure_kind]

    def fail(self, kind: FailureKind, cause: str) -> "RunOutcome":
        """Mark the run failed and return self."""
        self.failure_kind = kind
        self.cause = cause
        self.add_error(cause)
        return self
