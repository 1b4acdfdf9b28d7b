"""Shared models: formats, provenance metadata and workflow configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_VERSION = "1.0.0"
FILENAME_PLACEHOLDER = "{filename}"


class ArtifactFormat(str, Enum):
    HWPX = "hwpx"
    DOCX = "docx"
    UNKNOWN = "unknown"  # sentinel, never returned by successful detection


class SyncState(Enum):
    """How a managed directory relates to the artifact beside it."""

    IN_SYNC = "in sync"
    DIVERGED = "diverged"
    ARTIFACT_MISSING = "artifact missing"


class FileStats(BaseModel):
    size: int
    mtime: datetime
    ctime: datetime
    mode: int


class Metadata(BaseModel):
    """Provenance record persisted beside extracted content.

    Attributes
    ----------
    original_file: str
        Base name of the artifact the directory was extracted from.
    format: ArtifactFormat
        Detected format; never ``UNKNOWN``.
    extracted_at: datetime
        When extraction finished (UTC).
    original_stats: FileStats
        Size, times and permission bits of the artifact at extraction time.
    schema_version: str
        Version of this record's layout.
    """

    model_config = ConfigDict(populate_by_name=True)

    original_file: str = Field(alias="originalFile")
    format: ArtifactFormat
    extracted_at: datetime = Field(alias="extractedAt")
    original_stats: FileStats = Field(alias="originalStats")
    schema_version: str = Field(SCHEMA_VERSION, alias="schemaVersion")

    @field_validator("original_file")
    @classmethod
    def _bare_file_name(cls, value: str) -> str:
        if value in {".", ".."} or "/" in value or "\\" in value:
            raise ValueError(f"originalFile must be a bare file name: {value!r}")
        return value

    @field_validator("format")
    @classmethod
    def _known_format(cls, value: ArtifactFormat) -> ArtifactFormat:
        if value is ArtifactFormat.UNKNOWN:
            raise ValueError("metadata format must be a recognized format")
        return value


class WorkflowConfig(BaseModel):
    """Per-repository workflow options, read once per invocation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: str = SCHEMA_VERSION
    extract_dir_pattern: str = Field("{filename}_extracted", alias="extractDirPattern")
    auto_cleanup: bool = Field(True, alias="autoCleanup")
    supported_types: list[ArtifactFormat] = Field(
        default_factory=lambda: [ArtifactFormat.HWPX, ArtifactFormat.DOCX],
        alias="supportedTypes",
    )

    @field_validator("extract_dir_pattern")
    @classmethod
    def _has_placeholder(cls, value: str) -> str:
        if value.count(FILENAME_PLACEHOLDER) != 1:
            raise ValueError(f"extractDirPattern must contain {FILENAME_PLACEHOLDER} exactly once")
        if "/" in value or "\\" in value:
            raise ValueError("extractDirPattern must name a sibling directory")
        return value

    @field_validator("supported_types")
    @classmethod
    def _no_unknown(cls, value: list[ArtifactFormat]) -> list[ArtifactFormat]:
        if ArtifactFormat.UNKNOWN in value:
            raise ValueError("supportedTypes cannot contain 'unknown'")
        return value

    def extract_dir_name(self, stem: str) -> str:
        return self.extract_dir_pattern.replace(FILENAME_PLACEHOLDER, stem)

    def strip_pattern(self, dir_name: str) -> str | None:
        """Recover the artifact stem from a directory name, or None if it doesn't match."""
        prefix, suffix = self.extract_dir_pattern.split(FILENAME_PLACEHOLDER)
        if len(dir_name) <= len(prefix) + len(suffix):
            return None
        if not (dir_name.startswith(prefix) and dir_name.endswith(suffix)):
            return None
        return dir_name[len(prefix) : len(dir_name) - len(suffix)]

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class RenamedPath:
    from_path: str
    to_path: str


@dataclass(frozen=True)
class GitStatus:
    modified: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    renamed: list[RenamedPath] = field(default_factory=list)
