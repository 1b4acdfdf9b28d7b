"""Error kinds raised by gitument.

Every error carries the path it is about so the CLI can report exactly
what failed. None of them is retried.
"""

from __future__ import annotations

from pathlib import Path


class GitumentError(Exception):
    """Base class for all gitument failures."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class NotAccessible(GitumentError):
    """Input artifact or directory is missing or unreadable."""


class UnrecognizedFormat(GitumentError):
    """Extension or zip signature does not match a known format."""


class MissingRequiredMember(GitumentError):
    def __init__(self, path: Path | str, member: str) -> None:
        super().__init__(f"Missing required member {member!r} in {path}", path)
        self.member = member


class PathTraversal(GitumentError):
    """An archive member would resolve outside its extraction target."""

    def __init__(self, base: Path | str, member: str) -> None:
        super().__init__(f"Member escapes destination {base}: {member}", base)
        self.member = member


class MissingMetadata(GitumentError):
    """No valid sidecar metadata in a directory that needs one."""


class CorruptMetadata(MissingMetadata):
    """Sidecar is present but does not parse or validate."""


class OutputExists(GitumentError):
    """Destination already exists and overwriting was not requested."""


class CorruptArchive(GitumentError):
    def __init__(self, message: str, path: Path | str, member: str | None = None) -> None:
        super().__init__(message, path)
        self.member = member


class HookAlreadyInstalled(GitumentError):
    """A hook script exists and force was not requested."""


class ConfigError(GitumentError):
    """Workflow configuration file is present but invalid."""


class GitError(GitumentError):
    """A git command failed."""


class NotARepository(GitError):
    """Path is not inside a git work tree."""
