"""Format table and detection dispatcher.

Each recognized format is one `FormatSpec` entry in `FORMATS`: the
extensions it is known by, the members an archive must contain, and the
content members of which at least one is expected. Adding a format is a new
table entry; detection itself has no per-format branches.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from gitument.errors import NotAccessible, UnrecognizedFormat
from gitument.types import ArtifactFormat


@dataclass(frozen=True)
class FormatSpec:
    format: ArtifactFormat
    extensions: tuple[str, ...]
    required_members: tuple[str, ...]
    content_members: tuple[str, ...] = ()
    leading_member: str | None = None  # written first and stored when packing


FORMATS: dict[ArtifactFormat, FormatSpec] = {
    ArtifactFormat.HWPX: FormatSpec(
        format=ArtifactFormat.HWPX,
        extensions=(".hwpx",),
        required_members=("META-INF/manifest.xml",),
        content_members=(
            "Contents/content.hpf",
            "content.hpf",
            "Contents/content.xml",
            "content.xml",
        ),
        leading_member="mimetype",
    ),
    ArtifactFormat.DOCX: FormatSpec(
        format=ArtifactFormat.DOCX,
        extensions=(".docx",),
        required_members=("[Content_Types].xml", "word/document.xml"),
    ),
}

_BY_EXTENSION = {ext: spec.format for spec in FORMATS.values() for ext in spec.extensions}


def format_spec(fmt: ArtifactFormat) -> FormatSpec:
    try:
        return FORMATS[fmt]
    except KeyError:
        raise UnrecognizedFormat(f"No format definition for {fmt.value!r}") from None


def classify_by_extension(path: Path | str) -> ArtifactFormat:
    return _BY_EXTENSION.get(Path(path).suffix.lower(), ArtifactFormat.UNKNOWN)


def is_supported_file(path: Path | str, supported: Iterable[ArtifactFormat] | None = None) -> bool:
    """Extension-only check against the recognized formats (or the subset *supported*)."""
    fmt = classify_by_extension(path)
    if fmt is ArtifactFormat.UNKNOWN:
        return False
    return supported is None or fmt in set(supported)


def is_accessible_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def detect_file_type(path: Path | str) -> ArtifactFormat:
    """Run the detection stages in order and return the artifact's format.

    Stages: accessibility, zip signature, extension, member structure. The
    first failing stage raises; later stages do not run.
    """
    from .zip_layout import is_zip_container, validate_structure

    p = Path(path)
    if not is_accessible_file(p):
        raise NotAccessible(f"File is not accessible: {p}", p)
    if not is_zip_container(p):
        raise UnrecognizedFormat(f"Not a zip-based document: {p}", p)
    fmt = classify_by_extension(p)
    if fmt is ArtifactFormat.UNKNOWN:
        raise UnrecognizedFormat(f"Unsupported file extension: {p}", p)
    validate_structure(p, fmt)
    return fmt
