"""Precondition validation run before any device contact."""

from pathlib import Path

from uhkupdate.core.structlog_logger import StructlogMixin
from uhkupdate.firmware.models import (
    Layout,
    PreconditionCheck,
    PreconditionReport,
    ResolvedArtifacts,
)


ARTIFACT_LABELS = {
    PreconditionCheck.RIGHT_FIRMWARE: "Right firmware",
    PreconditionCheck.LEFT_FIRMWARE: "Left firmware",
    PreconditionCheck.USER_CONFIG: "User configuration",
}


def parse_layout(value: str) -> Layout | None:
    """Map a layout selector to a Layout, or None if it is not accepted.

    Only the exact lowercase values ``ansi`` and ``iso`` are accepted.
    """
    for layout in Layout:
        if value == layout.value:
            return layout
    return None


def check_artifact_file(path: Path) -> str | None:
    """Return a failure reason, or None if ``path`` is a non-empty regular file."""
    if not path.exists():
        return "not found"
    if not path.is_file():
        return "is not a regular file"
    if path.stat().st_size == 0:
        return "is empty"
    return None


class PreconditionValidator(StructlogMixin):
    """Checks every precondition, in a fixed order, stopping at the first failure."""

    def validate(
        self, artifacts: ResolvedArtifacts, layout: str | Layout
    ) -> PreconditionReport:
        """Validate resolved artifacts and the layout selector.

        Args:
            artifacts: Paths produced by the artifact resolver
            layout: Layout selector as given on the command line

        Returns:
            PreconditionReport naming the first failed check, if any
        """
        report = PreconditionReport(success=True)

        artifact_checks = [
            (PreconditionCheck.RIGHT_FIRMWARE, artifacts.right_firmware_path),
            (PreconditionCheck.LEFT_FIRMWARE, artifacts.left_firmware_path),
            (PreconditionCheck.USER_CONFIG, artifacts.user_config_path),
        ]
        for check, path in artifact_checks:
            reason = check_artifact_file(path)
            if reason is not None:
                return self._fail(
                    report, check, f"{ARTIFACT_LABELS[check]} path {reason}: {path}"
                )
            report.passed_checks.append(check)

        parsed = layout if isinstance(layout, Layout) else parse_layout(layout)
        if parsed is None:
            return self._fail(
                report,
                PreconditionCheck.LAYOUT,
                f"The specified layout is neither ansi nor iso: {layout!r}",
            )
        report.passed_checks.append(PreconditionCheck.LAYOUT)
        report.layout = parsed

        self.logger.debug("preconditions_passed", layout=parsed.value)
        return report

    def _fail(
        self, report: PreconditionReport, check: PreconditionCheck, reason: str
    ) -> PreconditionReport:
        self.logger.error("precondition_failed", check=check.value, reason=reason)
        report.failed_check = check
        report.add_error(reason)
        return report


def create_precondition_validator() -> PreconditionValidator:
    """Create a PreconditionValidator instance."""
    return PreconditionValidator()
