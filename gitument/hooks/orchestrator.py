"""Hook-time orchestration: extract on commit, repack on merge.

Both triggers are safe to re-run. Pre-commit replaces earlier extractions
and only appends missing ignore entries; post-merge skips packing when the
artifact on disk already matches the directory (a retry after a crash
between packing and cleanup). Within a batch the first failure stops
processing and propagates; finished items are not rolled back.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from gitument.core import STAGING_PREFIX, extract_artifact, is_supported_file, pack_directory
from gitument.errors import OutputExists, PathTraversal
from gitument.hooks.vcs import VersionControl
from gitument.integrity.checks import sync_state
from gitument.logging import get_logger
from gitument.metadata import load_metadata, metadata_path
from gitument.security.archive import safe_member_path
from gitument.types import GitStatus, Metadata, SyncState, WorkflowConfig

log = get_logger(__name__)

GITIGNORE = ".gitignore"
IGNORE_HEADER = "# gitument managed files"
_SKIP_DIRS = {".git"}


@dataclass(frozen=True)
class ManagedDirectory:
    path: Path
    metadata: Metadata
    artifact: Path
    state: SyncState


@dataclass
class RepositoryReport:
    root: Path
    config: WorkflowConfig
    pending: list[Path] = field(default_factory=list)
    managed: list[ManagedDirectory] = field(default_factory=list)
    git_status: GitStatus = field(default_factory=GitStatus)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


def extract_dir_for(artifact: Path, config: WorkflowConfig) -> Path:
    return artifact.parent / config.extract_dir_name(artifact.stem)


def original_artifact_for(directory: Path, metadata: Metadata, config: WorkflowConfig) -> Path:
    """Return the artifact path a managed directory packs back into.

    The sidecar's original file name wins; the directory name is only
    checked against the configured pattern and a mismatch is logged.
    """
    # originalFile may only name a sibling of the directory
    artifact = safe_member_path(directory.parent, metadata.original_file)
    if artifact.parent != directory.parent.resolve():
        raise PathTraversal(directory.parent, metadata.original_file)

    expected_stem = Path(metadata.original_file).stem
    derived = config.strip_pattern(directory.name)
    if derived != expected_stem:
        log.warning(
            "directory name %r does not match pattern %r for %s; using metadata",
            directory.name,
            config.extract_dir_pattern,
            metadata.original_file,
            extra={"path": directory},
        )
    return directory.parent / metadata.original_file


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def modified_artifacts(vcs: VersionControl, config: WorkflowConfig) -> list[Path]:
    """Modified, added and renamed-to artifacts of a configured format, in status order."""
    root = vcs.repository_root()
    status = vcs.status()
    candidates = [*status.modified, *status.created, *(r.to_path for r in status.renamed)]

    seen: set[str] = set()
    artifacts: list[Path] = []
    for rel in candidates:
        if rel in seen or not is_supported_file(rel, config.supported_types):
            continue
        seen.add(rel)
        artifacts.append(root / rel)
    return artifacts


def find_managed_directories(root: Path) -> list[Path]:
    """Depth-first search for managed directories below *root*.

    A managed directory is a leaf of the search: its contents are not
    visited. Children are visited in name order.
    """
    found: list[Path] = []
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            children = sorted(
                (p for p in current.iterdir() if p.is_dir() and not p.is_symlink()),
                reverse=True,
            )
        except OSError as e:
            log.warning("cannot list directory: %s", e, extra={"path": current})
            continue
        for child in children:
            if child.name in _SKIP_DIRS or child.name.startswith(STAGING_PREFIX):
                continue
            if load_metadata(metadata_path(child)) is not None:
                found.append(child)
            else:
                stack.append(child)
    return sorted(found)


# ---------------------------------------------------------------------------
# Ignore list
# ---------------------------------------------------------------------------


def add_to_ignore(root: Path, artifact: Path) -> bool:
    """Append *artifact* to the repository's .gitignore unless already listed."""
    gitignore = root / GITIGNORE
    entry = artifact.resolve().relative_to(root.resolve()).as_posix()

    content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
    if entry in content:
        return False

    prefix = "" if not content or content.endswith("\n") else "\n"
    with open(gitignore, "a", encoding="utf-8") as f:
        f.write(f"{prefix}\n{IGNORE_HEADER}\n{entry}\n")
    return True


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


def process_pre_commit(vcs: VersionControl, config: WorkflowConfig) -> list[Path]:
    """Extract every changed artifact, ignore the binary and stage the directory."""
    root = vcs.repository_root()
    artifacts = modified_artifacts(vcs, config)
    if not artifacts:
        log.info("no documents to extract")
        return []

    extracted: list[Path] = []
    for artifact in artifacts:
        target = extract_dir_for(artifact, config)
        log.info("extracting %s", artifact.name, extra={"path": artifact})
        extract_artifact(artifact, target)
        add_to_ignore(root, artifact)
        vcs.add(target)
        extracted.append(target)
    return extracted


def process_post_merge(root: Path, config: WorkflowConfig) -> list[Path]:
    """Pack every managed directory back into its artifact."""
    directories = find_managed_directories(root)
    if not directories:
        log.info("no extracted directories to pack")
        return []

    packed: list[Path] = []
    for directory in directories:
        metadata = load_metadata(metadata_path(directory))
        if metadata is None:
            # vanished or was corrupted since discovery
            continue
        artifact = original_artifact_for(directory, metadata, config)

        if artifact.exists():
            if sync_state(artifact, directory) is not SyncState.IN_SYNC:
                raise OutputExists(
                    f"{artifact} exists and differs from {directory.name}", artifact
                )
            log.info("already packed: %s", artifact.name, extra={"path": artifact})
        else:
            pack_directory(directory, artifact)

        if config.auto_cleanup:
            shutil.rmtree(directory)
        packed.append(artifact)
    return packed


def inspect_repository(vcs: VersionControl, config: WorkflowConfig) -> RepositoryReport:
    """Read-only summary for the status command."""
    root = vcs.repository_root()
    report = RepositoryReport(
        root=root,
        config=config,
        pending=modified_artifacts(vcs, config),
        git_status=vcs.status(),
    )
    for directory in find_managed_directories(root):
        metadata = load_metadata(metadata_path(directory))
        if metadata is None:
            continue
        artifact = directory.parent / metadata.original_file
        report.managed.append(
            ManagedDirectory(
                path=directory,
                metadata=metadata,
                artifact=artifact,
                state=sync_state(artifact, directory),
            )
        )
    return report
