"""Firmware update domain.

This package contains the factory update pipeline:
- Artifact resolution from firmware bundles
- Precondition validation
- The fixed update plan and its orchestrator
- The top-level update service
"""

from .models import (
    DeviceVariant,
    ExitCode,
    FailureKind,
    FirmwareManifest,
    Layout,
    PreconditionCheck,
    ResolvedArtifacts,
    RunOutcome,
    UpdatePlan,
    UpdateResult,
    UpdateState,
    UpdateStep,
)
from .orchestrator import DeviceUpdateOrchestrator, create_device_update_orchestrator
from .plan import FACTORY_TEST_KEYMAP, STEP_ORDER, build_update_plan
from .resolver import ArtifactResolver, create_artifact_resolver
from .service import FactoryUpdateService, create_factory_update_service
from .validator import (
    PreconditionValidator,
    create_precondition_validator,
    parse_layout,
)


__all__ = [
    # Services and factories
    "ArtifactResolver",
    "DeviceUpdateOrchestrator",
    "FactoryUpdateService",
    "PreconditionValidator",
    "create_artifact_resolver",
    "create_device_update_orchestrator",
    "create_factory_update_service",
    "create_precondition_validator",
    # Plan
    "FACTORY_TEST_KEYMAP",
    "STEP_ORDER",
    "build_update_plan",
    "parse_layout",
    # Models
    "DeviceVariant",
    "ExitCode",
    "FailureKind",
    "FirmwareManifest",
    "Layout",
    "PreconditionCheck",
    "ResolvedArtifacts",
    "RunOutcome",
    "UpdatePlan",
    "UpdateResult",
    "UpdateState",
    "UpdateStep",
]
