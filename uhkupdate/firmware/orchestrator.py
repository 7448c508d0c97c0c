"""Device update orchestrator.

Executes an UpdatePlan strictly in order against a DeviceOperationsProtocol
implementation. Each step enters its state, issues exactly one device call
and advances only when that call returns. The first failure ends the run in
the Failed state; nothing is retried and earlier steps are not rolled back.
"""

import logging
from collections.abc import Callable

from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.firmware.models import (
    STEP_STATES,
    DeviceVariant,
    FlashLeftStep,
    FlashRightStep,
    PlannedStep,
    SwitchKeymapStep,
    UpdatePlan,
    UpdateResult,
    UpdateState,
    WriteHardwareConfigStep,
    WriteUserConfigStep,
)
from uhkupdate.protocols import DeviceOperationsProtocol


StateCallback = Callable[[UpdateState], None]


class DeviceUpdateOrchestrator(StructlogMixin):
    """Runs the ordered, fail-fast update sequence."""

    def __init__(
        self,
        operations: DeviceOperationsProtocol,
        on_state: StateCallback | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            operations: Device operations collaborator
            on_state: Optional callback invoked on every state entry
        """
        super().__init__()
        self.operations = operations
        self.on_state = on_state

    def execute(self, plan: UpdatePlan, variant: DeviceVariant) -> UpdateResult:
        """Execute ``plan`` against the attached ``variant``.

        Device failures never propagate; they are reported in the result.

        Args:
            plan: The update plan, consumed once from first to last step
            variant: Attached device variant passed to the flash operations

        Returns:
            UpdateResult with the visited states and, on failure, the failed
            step and its cause
        """
        result = UpdateResult(success=True)
        self._enter(result, UpdateState.IDLE)

        for planned in plan.steps:
            self._enter(result, STEP_STATES[planned.step])
            log = self.logger.bind(step=planned.step.value)
            log.info("update_step_started")

            try:
                self._run_step(planned, variant)
            except Exception as e:
                cause = str(e) or e.__class__.__name__
                exc_info = logging.getLogger().isEnabledFor(logging.DEBUG)
                log.error(
                    "update_step_failed",
                    error=cause,
                    error_type=e.__class__.__name__,
                    exc_info=exc_info,
                )
                result.failed_step = planned.step
                result.cause = cause
                result.add_error(f"Step '{planned.step.value}' failed: {cause}")
                self._enter(result, UpdateState.FAILED)
                return result

            result.completed_steps.append(planned.step)
            log.info("update_step_completed")

        self._enter(result, UpdateState.DONE)
        result.add_message("All update steps completed")
        return result

    def _enter(self, result: UpdateResult, state: UpdateState) -> None:
        result.visited_states.append(state)
        self.logger.debug("update_state_entered", state=state.value)
        if self.on_state is not None:
            self.on_state(state)

    def _run_step(self, planned: PlannedStep, variant: DeviceVariant) -> None:
        ops = self.operations
        if isinstance(planned, FlashRightStep):
            ops.flash_right_unit(planned.image_path, variant)
        elif isinstance(planned, FlashLeftStep):
            ops.flash_left_module(planned.image_path, variant)
        elif isinstance(planned, WriteUserConfigStep):
            # Read once, passed by value; content is opaque here
            data = planned.config_path.read_bytes()
            ops.write_user_configuration(data)
        elif isinstance(planned, WriteHardwareConfigStep):
            ops.write_hardware_configuration(planned.is_iso)
        elif isinstance(planned, SwitchKeymapStep):
            ops.switch_keymap(planned.keymap)
        else:
            raise TypeError(f"Unknown update step: {planned!r}")


def create_device_update_orchestrator(
    operations: DeviceOperationsProtocol,
    on_state: StateCallback | None = None,
) -> DeviceUpdateOrchestrator:
    """Create a DeviceUpdateOrchestrator instance."""
    return DeviceUpdateOrchestrator(operations=operations, on_state=on_state)
