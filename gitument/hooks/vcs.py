"""Git collaborator: the handful of repository queries the hooks need.

The orchestrator only talks to the `VersionControl` protocol so tests can
swap in an in-memory fake. `Git` implements it by shelling out to `git`.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from gitument.errors import GitError, NotARepository
from gitument.types import GitStatus, RenamedPath


class VersionControl(Protocol):
    def is_repository(self) -> bool: ...

    def status(self) -> GitStatus: ...

    def add(self, path: Path) -> None: ...

    def repository_root(self) -> Path: ...


def parse_porcelain(output: str) -> GitStatus:
    """Parse `git status --porcelain=v1 -z` output.

    Index `A` counts as created, `M` in either column as modified, `D` in
    either column as deleted and index `R` as renamed. Untracked and ignored
    entries are skipped.
    """
    modified: list[str] = []
    created: list[str] = []
    deleted: list[str] = []
    renamed: list[RenamedPath] = []

    records = output.split("\0")
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        if len(record) < 4:
            continue
        x, y, path = record[0], record[1], record[3:]
        if x in "RC":
            # -z puts the source path in the following record
            source = records[i] if i < len(records) else ""
            i += 1
            if x == "R":
                renamed.append(RenamedPath(from_path=source, to_path=path))
            else:
                created.append(path)
            if y == "M":
                modified.append(path)
            continue
        if x in "?!":
            continue
        if x == "A":
            created.append(path)
        elif "M" in (x, y):
            modified.append(path)
        if "D" in (x, y):
            deleted.append(path)

    return GitStatus(modified=modified, created=created, deleted=deleted, renamed=renamed)


class Git:
    """`VersionControl` backed by the git command line."""

    def __init__(self, path: Path | str, executable: str | None = None) -> None:
        self.path = Path(path)
        self.executable = executable or shutil.which("git") or "git"

    def _run(self, *args: str) -> str:
        try:
            proc = subprocess.run(
                [self.executable, *args],
                cwd=self.path,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise GitError(f"Cannot run git: {e}", self.path) from e
        if proc.returncode != 0:
            raise GitError(
                f"git {' '.join(args)} failed: {proc.stderr.strip() or proc.returncode}",
                self.path,
            )
        return proc.stdout

    def is_repository(self) -> bool:
        try:
            return self._run("rev-parse", "--is-inside-work-tree").strip() == "true"
        except GitError:
            return False

    def repository_root(self) -> Path:
        try:
            out = self._run("rev-parse", "--show-toplevel")
        except GitError as e:
            raise NotARepository(f"Not a git repository: {self.path}", self.path) from e
        return Path(out.strip()).resolve()

    def status(self) -> GitStatus:
        return parse_porcelain(self._run("status", "--porcelain=v1", "-z", "--untracked-files=no"))

    def add(self, path: Path) -> None:
        self._run("add", "--", str(path))
