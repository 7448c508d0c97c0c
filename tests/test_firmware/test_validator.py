"""Tests for precondition validation."""

import pytest

from uhkupdate.firmware.models import Layout, PreconditionCheck, ResolvedArtifacts
from uhkupdate.firmware.resolver import ArtifactResolver
from uhkupdate.firmware.validator import (
    PreconditionValidator,
    check_artifact_file,
    create_precondition_validator,
    parse_layout,
)


@pytest.fixture
def resolve(v2_variant):
    """Resolve a bundle directory for the v2 variant."""

    def _resolve(bundle) -> ResolvedArtifacts:
        return ArtifactResolver().resolve_directory(bundle, v2_variant)

    return _resolve


class TestParseLayout:
    """Test the layout selector."""

    def test_accepted_values(self):
        assert parse_layout("ansi") is Layout.ANSI
        assert parse_layout("iso") is Layout.ISO

    @pytest.mark.parametrize("value", ["ANSI", "Iso", "jis", "", " ansi", "ansi "])
    def test_rejected_values(self, value):
        assert parse_layout(value) is None


class TestCheckArtifactFile:
    """Test artifact file checks."""

    def test_regular_file(self, tmp_path):
        path = tmp_path / "image.bin"
        path.write_bytes(b"\x01")
        assert check_artifact_file(path) is None

    def test_missing(self, tmp_path):
        assert check_artifact_file(tmp_path / "missing.bin") == "not found"

    def test_directory(self, tmp_path):
        assert check_artifact_file(tmp_path) == "is not a regular file"

    def test_empty(self, tmp_path):
        path = tmp_path / "empty.bin"
        path.touch()
        assert check_artifact_file(path) == "is empty"


class TestPreconditionValidator:
    """Test ordered, short-circuiting precondition validation."""

    def test_all_checks_pass(self, bundle_dir, resolve):
        report = create_precondition_validator().validate(resolve(bundle_dir), "iso")

        assert report.success
        assert report.failed_check is None
        assert report.layout is Layout.ISO
        assert report.passed_checks == list(PreconditionCheck)

    def test_layout_enum_is_accepted(self, bundle_dir, resolve):
        report = PreconditionValidator().validate(resolve(bundle_dir), Layout.ANSI)

        assert report.success
        assert report.layout is Layout.ANSI

    @pytest.mark.parametrize(
        ("omit", "failed_check", "message"),
        [
            ("right", PreconditionCheck.RIGHT_FIRMWARE, "Right firmware path not found"),
            ("left", PreconditionCheck.LEFT_FIRMWARE, "Left firmware path not found"),
            ("config", PreconditionCheck.USER_CONFIG, "User configuration path not found"),
        ],
    )
    def test_missing_artifact(self, bundle_factory, resolve, omit, failed_check, message):
        bundle = bundle_factory(omit=(omit,))

        report = PreconditionValidator().validate(resolve(bundle), "ansi")

        assert not report.success
        assert report.failed_check is failed_check
        assert report.errors[0].startswith(message)
        assert report.layout is None

    def test_empty_artifact_fails(self, bundle_factory, resolve):
        bundle = bundle_factory(empty=("left",))

        report = PreconditionValidator().validate(resolve(bundle), "ansi")

        assert report.failed_check is PreconditionCheck.LEFT_FIRMWARE
        assert "is empty" in report.errors[0]

    def test_first_failure_wins(self, bundle_factory, resolve):
        bundle = bundle_factory(omit=("left", "config"))

        report = PreconditionValidator().validate(resolve(bundle), "dvorak")

        assert report.failed_check is PreconditionCheck.LEFT_FIRMWARE
        assert report.passed_checks == [PreconditionCheck.RIGHT_FIRMWARE]
        assert len(report.errors) == 1

    def test_artifacts_checked_before_layout(self, bundle_factory, resolve):
        bundle = bundle_factory(omit=("right",))

        report = PreconditionValidator().validate(resolve(bundle), "qwertz")

        assert report.failed_check is PreconditionCheck.RIGHT_FIRMWARE

    def test_invalid_layout(self, bundle_dir, resolve):
        report = PreconditionValidator().validate(resolve(bundle_dir), "ISO")

        assert report.failed_check is PreconditionCheck.LAYOUT
        assert report.errors == ["The specified layout is neither ansi nor iso: 'ISO'"]
        assert PreconditionCheck.USER_CONFIG in report.passed_checks
