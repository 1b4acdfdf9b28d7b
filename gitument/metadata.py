"""Sidecar provenance record for extracted directories.

A directory is managed by gitument iff `.gitument.json` exists in it and
parses. `load_metadata` is the optional lookup used for that test and
returns None instead of raising; `read_metadata` is the strict variant that
tells an absent sidecar apart from a corrupt one.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

from jsonschema import ValidationError
from pydantic import ValidationError as ModelValidationError

from gitument.errors import CorruptMetadata, MissingMetadata
from gitument.types import FileStats, Metadata
from gitument.validator import validate_metadata

METADATA_FILENAME = ".gitument.json"


def metadata_path(directory: Path | str) -> Path:
    return Path(directory) / METADATA_FILENAME


def capture_stats(path: Path) -> FileStats:
    st = path.stat()
    return FileStats(
        size=st.st_size,
        mtime=datetime.fromtimestamp(st.st_mtime, UTC),
        ctime=datetime.fromtimestamp(st.st_ctime, UTC),
        mode=st.st_mode,
    )


def save_metadata(path: Path, metadata: Metadata) -> None:
    data = metadata.model_dump(mode="json", by_alias=True)
    validate_metadata(data)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def read_metadata(path: Path) -> Metadata:
    """Load *path*, raising MissingMetadata if absent and CorruptMetadata if invalid."""
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise MissingMetadata(f"Metadata file not found: {path}", path) from e
    except OSError as e:
        raise MissingMetadata(f"Cannot read metadata {path}: {e}", path) from e

    try:
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("metadata must be a JSON object")
        validate_metadata(data)
        return Metadata.model_validate(data)
    except (ValueError, ValidationError, ModelValidationError) as e:
        raise CorruptMetadata(f"Invalid metadata in {path}: {e}", path) from e


def load_metadata(path: Path) -> Metadata | None:
    try:
        return read_metadata(path)
    except MissingMetadata:
        return None
