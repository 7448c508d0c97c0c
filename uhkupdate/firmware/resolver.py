"""Artifact resolution for firmware bundles.

A bundle is either a directory or an archive of one. Archives are unpacked
into a scratch directory that lives exactly as long as the ``resolve()``
context; paths handed out inside the context are only valid there.
"""

import json
import shutil
import tarfile
import tempfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from uhkupdate.core.errors import ResolutionError
from uhkupdate.core.structlog_logger import StructlogMixin, get_struct_logger
from uhkupdate.firmware.models import DeviceVariant, FirmwareManifest, ResolvedArtifacts


logger = get_struct_logger(__name__)

MANIFEST_FILENAME = "package.json"
RIGHT_FIRMWARE_FILENAME = "firmware.hex"
LEFT_FIRMWARE_RELATIVE_PATH = Path("modules") / "uhk60-left.bin"
USER_CONFIG_RELATIVE_PATH = Path("devices") / "uhk60-right" / "config.bin"

TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".tar")
ZIP_SUFFIXES = (".zip",)


def is_archive(path: Path) -> bool:
    """Check if the path names a supported bundle archive."""
    name = path.name.lower()
    return name.endswith(TAR_SUFFIXES + ZIP_SUFFIXES)


def load_manifest(manifest_path: Path) -> FirmwareManifest:
    """Read and validate a bundle manifest.

    Raises:
        ResolutionError: If the file cannot be read, is not JSON, or lacks
            required fields
    """
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ResolutionError(f"Cannot read manifest {manifest_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ResolutionError(f"Manifest {manifest_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ResolutionError(f"Manifest {manifest_path} must be a JSON object")

    try:
        return FirmwareManifest.model_validate(data)
    except ValidationError as e:
        raise ResolutionError(f"Manifest {manifest_path} is invalid: {e}") from e


def _ensure_inside(root: Path, member_name: str) -> None:
    target = (root / member_name).resolve()
    if not target.is_relative_to(root):
        raise ResolutionError(f"Archive member escapes extraction root: {member_name}")


def extract_archive(archive: Path, destination: Path) -> None:
    """Extract a bundle archive into ``destination``.

    Raises:
        ResolutionError: If the archive is corrupt or contains unsafe members
    """
    root = destination.resolve()
    try:
        if archive.name.lower().endswith(ZIP_SUFFIXES):
            with zipfile.ZipFile(archive) as zf:
                for name in zf.namelist():
                    _ensure_inside(root, name)
                zf.extractall(root)
        else:
            with tarfile.open(archive) as tf:
                for member in tf.getmembers():
                    _ensure_inside(root, member.name)
                    if member.issym() or member.islnk():
                        raise ResolutionError(
                            f"Archive member is a link, refusing to extract: {member.name}"
                        )
                tf.extractall(root, filter="data")
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise ResolutionError(f"Cannot extract firmware archive {archive}: {e}") from e


def find_bundle_root(extracted: Path) -> Path:
    """Locate the bundle root inside an extracted archive.

    Release archives usually wrap everything in one top-level directory.
    """
    if (extracted / MANIFEST_FILENAME).exists():
        return extracted
    entries = list(extracted.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return extracted


def _device_directory(root: Path, device_name: str) -> Path:
    """Directory of a manifest device entry, which must stay inside ``root``."""
    if device_name in ("", ".", "..") or Path(device_name).name != device_name:
        raise ResolutionError(
            f"Invalid device name in firmware manifest: {device_name!r}"
        )
    device_dir = root / "devices" / device_name
    if not device_dir.resolve().is_relative_to(root):
        raise ResolutionError(
            f"Device directory {device_name!r} points outside the firmware bundle"
        )
    return device_dir


class ArtifactResolver(StructlogMixin):
    """Derives artifact paths from a bundle and the attached device variant."""

    def __init__(self, scratch_parent: Path | None = None) -> None:
        """Initialize the resolver.

        Args:
            scratch_parent: Directory for scratch extraction; system temp if None
        """
        super().__init__()
        self.scratch_parent = scratch_parent

    @contextmanager
    def resolve(
        self, bundle: Path | str, variant: DeviceVariant
    ) -> Iterator[ResolvedArtifacts]:
        """Resolve the artifacts of ``bundle`` for ``variant``.

        Args:
            bundle: Bundle directory or archive
            variant: Attached device variant

        Yields:
            ResolvedArtifacts with absolute paths

        Raises:
            ResolutionError: If the bundle or manifest cannot be resolved
        """
        bundle_path = Path(bundle).expanduser()
        if not bundle_path.exists():
            raise ResolutionError(f"Firmware bundle not found: {bundle_path}")

        if bundle_path.is_dir():
            yield self.resolve_directory(bundle_path, variant)
            return

        if not is_archive(bundle_path):
            raise ResolutionError(
                f"Firmware bundle is neither a directory nor a supported archive: {bundle_path}"
            )

        scratch = Path(
            tempfile.mkdtemp(prefix="uhkupdate_bundle_", dir=self.scratch_parent)
        )
        self.logger.debug(
            "bundle_extracting", archive=str(bundle_path), scratch=str(scratch)
        )
        try:
            extract_archive(bundle_path, scratch)
            yield self.resolve_directory(find_bundle_root(scratch), variant)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
            self.logger.debug("bundle_scratch_removed", scratch=str(scratch))

    def resolve_directory(
        self, bundle_root: Path, variant: DeviceVariant
    ) -> ResolvedArtifacts:
        """Resolve artifacts of an unpacked bundle directory."""
        root = bundle_root.resolve()
        manifest_path = root / MANIFEST_FILENAME
        if not manifest_path.is_file():
            raise ResolutionError(f"Firmware manifest not found: {manifest_path}")

        manifest = load_manifest(manifest_path)
        device = manifest.find_device(variant.id)
        if device is None:
            compatible = sorted(manifest.compatible_device_ids)
            raise ResolutionError(
                f"Firmware {manifest.name} {manifest.version} has no image for "
                f"{variant.display_name} (device id {variant.id}); "
                f"compatible device ids: {compatible}"
            )

        device_dir = _device_directory(root, device.name)

        artifacts = ResolvedArtifacts(
            bundle_root=root,
            manifest=manifest,
            variant=variant,
            right_firmware_path=device_dir / RIGHT_FIRMWARE_FILENAME,
            left_firmware_path=root / LEFT_FIRMWARE_RELATIVE_PATH,
            user_config_path=root / USER_CONFIG_RELATIVE_PATH,
        )
        self.logger.info(
            "artifacts_resolved",
            firmware_version=manifest.version,
            variant=variant.name,
            right=str(artifacts.right_firmware_path),
            left=str(artifacts.left_firmware_path),
            user_config=str(artifacts.user_config_path),
        )
        return artifacts


def create_artifact_resolver(scratch_parent: Path | None = None) -> ArtifactResolver:
    """Create an ArtifactResolver instance."""
    return ArtifactResolver(scratch_parent=scratch_parent)
