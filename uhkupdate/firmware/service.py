"""Factory update pipeline.

Discovery, resolution, validation and orchestration chained into one run
that always ends in a RunOutcome. Nothing here exits the process; the CLI
maps the outcome to an exit code.
"""

from collections.abc import Callable
from pathlib import Path

from uhkupdate.core.errors import ConfigError, DiscoveryError, ResolutionError
from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.firmware.models import (
    DeviceVariant,
    FailureKind,
    Layout,
    ResolvedArtifacts,
    RunOutcome,
)
from uhkupdate.firmware.orchestrator import DeviceUpdateOrchestrator, StateCallback
from uhkupdate.firmware.plan import FACTORY_TEST_KEYMAP, build_update_plan
from uhkupdate.firmware.resolver import ArtifactResolver
from uhkupdate.firmware.validator import PreconditionValidator
from uhkupdate.protocols import DeviceDiscoveryProtocol, DeviceOperationsProtocol


OperationsFactory = Callable[[], DeviceOperationsProtocol]


class FactoryUpdateService(StructlogMixin):
    """Runs one complete factory update against one attached keyboard."""

    service_name = "FactoryUpdateService"

    def __init__(
        self,
        discovery: DeviceDiscoveryProtocol | None = None,
        operations: DeviceOperationsProtocol | None = None,
        resolver: ArtifactResolver | None = None,
        validator: PreconditionValidator | None = None,
        on_state: StateCallback | None = None,
        operations_factory: OperationsFactory | None = None,
    ) -> None:
        """Initialize the service with its collaborators.

        Args:
            discovery: Finds the attached variant; required by ``run``
            operations: Device operations; required unless running dry
            resolver: Artifact resolver
            validator: Precondition validator
            on_state: Callback forwarded to the orchestrator
            operations_factory: Builds the device operations once every
                precondition has passed; used when ``operations`` is None
        """
        super().__init__()
        self.discovery = discovery
        self.operations = operations
        self.resolver = resolver or ArtifactResolver()
        self.validator = validator or PreconditionValidator()
        self.on_state = on_state
        self.operations_factory = operations_factory

    def run(
        self,
        bundle: Path | str,
        layout: str | Layout,
        keymap: str = FACTORY_TEST_KEYMAP,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Discover the attached keyboard and update it from ``bundle``.

        Args:
            bundle: Bundle directory or archive
            layout: Layout selector (``ansi`` or ``iso``)
            keymap: Keymap activated in the last step
            dry_run: Stop after building the plan

        Returns:
            RunOutcome describing success or the failing stage
        """
        if self.discovery is None:
            return RunOutcome(success=True, dry_run=dry_run).fail(
                FailureKind.CONFIG, "No device discovery configured"
            )

        try:
            variant = self.discovery.discover_device_variant()
        except DiscoveryError as e:
            self.log_error_with_context("device_discovery_failed", e)
            return RunOutcome(success=True, dry_run=dry_run).fail(
                FailureKind.DISCOVERY, str(e)
            )

        self.logger.info(
            "device_discovered", variant=variant.name, serial=variant.serial_number
        )
        return self.run_for_variant(variant, bundle, layout, keymap, dry_run)

    def run_for_variant(
        self,
        variant: DeviceVariant,
        bundle: Path | str,
        layout: str | Layout,
        keymap: str = FACTORY_TEST_KEYMAP,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Resolve, validate and (unless ``dry_run``) apply ``bundle`` to ``variant``."""
        outcome = RunOutcome(success=True, dry_run=dry_run, variant=variant)

        try:
            with self.resolver.resolve(bundle, variant) as artifacts:
                outcome.artifacts = artifacts
                return self._validate_and_apply(
                    outcome, artifacts, variant, layout, keymap
                )
        except ResolutionError as e:
            self.log_error_with_context("artifact_resolution_failed", e)
            return outcome.fail(FailureKind.RESOLUTION, str(e))

    def _validate_and_apply(
        self,
        outcome: RunOutcome,
        artifacts: ResolvedArtifacts,
        variant: DeviceVariant,
        layout: str | Layout,
        keymap: str,
    ) -> RunOutcome:
        report = self.validator.validate(artifacts, layout)
        if not report.success or report.layout is None:
            outcome.failed_check = report.failed_check
            cause = report.errors[0] if report.errors else "Precondition failed"
            return outcome.fail(FailureKind.PRECONDITION, cause)

        plan = build_update_plan(artifacts, report.layout, keymap)
        outcome.plan = plan

        if outcome.dry_run:
            outcome.add_message("Dry run: no device changes made")
            return outcome

        try:
            operations = self._get_operations()
        except ConfigError as e:
            self.log_error_with_context("device_operations_unavailable", e)
            return outcome.fail(FailureKind.CONFIG, str(e))

        try:
            operations.open()
        except Exception as e:
            self.log_error_with_context("device_open_failed", e)
            return outcome.fail(FailureKind.DEVICE, f"Cannot open device: {e}")

        try:
            orchestrator = DeviceUpdateOrchestrator(operations, on_state=self.on_state)
            result = orchestrator.execute(plan, variant)
        finally:
            release_error = self._release(operations)

        outcome.visited_states = list(result.visited_states)
        if not result.success:
            outcome.failed_step = result.failed_step
            step = result.failed_step.value if result.failed_step else "unknown"
            return outcome.fail(
                FailureKind.DEVICE, f"Step '{step}' failed: {result.cause}"
            )

        if release_error is not None:
            return outcome.fail(
                FailureKind.DEVICE, f"Failed to release device: {release_error}"
            )

        outcome.messages.extend(result.messages)
        self.logger.info(
            "factory_update_completed",
            variant=variant.name,
            firmware_version=artifacts.manifest.version,
        )
        return outcome

    def _get_operations(self) -> DeviceOperationsProtocol:
        if self.operations is None and self.operations_factory is not None:
            self.operations = self.operations_factory()
        if self.operations is None:
            raise ConfigError("No device operations configured")
        return self.operations

    def _release(self, operations: DeviceOperationsProtocol) -> Exception | None:
        try:
            operations.close()
        except Exception as e:
            self.log_error_with_context("device_release_failed", e)
            return e
        return None


def create_factory_update_service(
    discovery: DeviceDiscoveryProtocol | None = None,
    operations: DeviceOperationsProtocol | None = None,
    on_state: StateCallback | None = None,
    operations_factory: OperationsFactory | None = None,
) -> FactoryUpdateService:
    """Create a FactoryUpdateService with default resolver and validator."""
    return FactoryUpdateService(
        discovery=discovery,
        operations=operations,
        on_state=on_state,
        operations_factory=operations_factory,
    )
