"""Archive processing: artifact -> directory + metadata, and back.

Extraction goes through a staging directory next to the target and is
swapped into place only after every member and the metadata have been
written, so a failed extraction never leaves a half-populated directory.
"""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
import zipfile
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from gitument.detect.base import detect_file_type, format_spec
from gitument.detect.base import is_supported_file as _is_supported_extension
from gitument.errors import CorruptArchive, MissingMetadata, NotAccessible, OutputExists
from gitument.integrity.checks import validate_archive
from gitument.logging import get_logger
from gitument.metadata import (
    METADATA_FILENAME,
    capture_stats,
    load_metadata,
    metadata_path,
    save_metadata,
)
from gitument.package.zip import write_zip
from gitument.security.archive import safe_extract_zip
from gitument.types import SCHEMA_VERSION, ArtifactFormat, Metadata

log = get_logger(__name__)

STAGING_PREFIX = ".gitument-staging-"


def _replace_dir(staging: Path, target: Path) -> None:
    if target.exists():
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
    os.replace(staging, target)


def extract_artifact(archive_path: Path | str, output_dir: Path | str) -> Path:
    """Extract *archive_path* into *output_dir* and record provenance metadata.

    Re-running with the same inputs replaces the previous extraction.

    Raises
    ------
    NotAccessible, UnrecognizedFormat, MissingRequiredMember
        From format detection.
    PathTraversal
        If any member would land outside *output_dir*; nothing is written.
    CorruptArchive
        If a member cannot be decompressed.
    """
    archive = Path(archive_path)
    target = Path(output_dir)
    fmt = detect_file_type(archive)

    target.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=target.parent))
    try:
        try:
            with zipfile.ZipFile(archive) as zf:
                count = safe_extract_zip(zf, staging, reserved=(METADATA_FILENAME,))
        except zipfile.BadZipFile as e:
            raise CorruptArchive(f"Cannot read archive {archive}: {e}", archive) from e

        metadata = Metadata(
            original_file=archive.name,
            format=fmt,
            extracted_at=datetime.now(UTC),
            original_stats=capture_stats(archive),
            schema_version=SCHEMA_VERSION,
        )
        save_metadata(metadata_path(staging), metadata)
        # mkdtemp creates 0700; give the tree the usual directory mode
        staging.chmod(0o755)
        _replace_dir(staging, target)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    log.info("extracted %d files from %s", count, archive.name, extra={"path": target})
    return target


def pack_directory(dir_path: Path | str, output_file: Path | str) -> Path:
    """Pack a managed directory into *output_file*, which must not exist yet."""
    directory = Path(dir_path)
    output = Path(output_file)

    if not directory.is_dir():
        raise NotAccessible(f"Directory does not exist: {directory}", directory)

    metadata = load_metadata(metadata_path(directory))
    if metadata is None:
        raise MissingMetadata(f"No gitument metadata in {directory}", metadata_path(directory))

    if output.exists():
        raise OutputExists(f"Output file already exists: {output}", output)

    output.parent.mkdir(parents=True, exist_ok=True)
    spec = format_spec(metadata.format)
    try:
        count = write_zip(directory, output, leading_member=spec.leading_member)
    except FileExistsError as e:
        raise OutputExists(f"Output file already exists: {output}", output) from e
    except BaseException:
        output.unlink(missing_ok=True)
        raise

    try:
        output.chmod(stat.S_IMODE(metadata.original_stats.mode))
        validate_archive(output)
    except BaseException:
        output.unlink(missing_ok=True)
        raise
    log.info("packed %d members into %s", count, output.name, extra={"path": output})
    return output


def validate_artifact(file_path: Path | str) -> bool:
    return validate_archive(Path(file_path))


def is_supported_file(path: Path | str, supported: Iterable[ArtifactFormat] | None = None) -> bool:
    return _is_supported_extension(path, supported)


def is_managed_directory(dir_path: Path | str) -> bool:
    return load_metadata(metadata_path(dir_path)) is not None
