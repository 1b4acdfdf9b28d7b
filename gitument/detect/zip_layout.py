"""Zip container checks: signature sniffing and required-member layout."""

from __future__ import annotations

import zipfile
from pathlib import Path

from gitument.errors import CorruptArchive, MissingRequiredMember
from gitument.logging import get_logger
from gitument.types import ArtifactFormat

from .base import format_spec

log = get_logger(__name__)

ZIP_SIGNATURE = b"PK"


def is_zip_container(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return f.read(2) == ZIP_SIGNATURE
    except OSError:
        return False


def validate_structure(path: Path, fmt: ArtifactFormat) -> None:
    """Raise MissingRequiredMember if *path* lacks a member *fmt* requires.

    Missing content members only produce a warning.
    """
    spec = format_spec(fmt)
    try:
        with zipfile.ZipFile(path) as zf:
            names = set(zf.namelist())
    except (zipfile.BadZipFile, OSError) as e:
        raise CorruptArchive(f"Cannot read archive {path}: {e}", path) from e

    for member in spec.required_members:
        if member not in names:
            raise MissingRequiredMember(path, member)

    if spec.content_members and not any(m in names for m in spec.content_members):
        log.warning(
            "no content member found in %s archive; continuing",
            fmt.value,
            extra={"path": path},
        )
