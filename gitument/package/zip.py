"""Zip writer for extracted document directories.

Builds a document archive from a managed directory:
- every file becomes a member at its POSIX path relative to the directory
- empty directories become directory entries
- the sidecar metadata file at the top level is never packed
- a format's leading member (e.g. HWPX `mimetype`) goes first, stored
"""

from __future__ import annotations

import zipfile
from pathlib import Path

from gitument.metadata import METADATA_FILENAME


def _as_rel_arcname(root: Path, path: Path) -> str:
    """Return a relative arcname with forward slashes."""
    return path.relative_to(root).as_posix()


def collect_members(directory: Path) -> list[tuple[Path, str]]:
    """Return sorted (filesystem_path, arcname) pairs for everything to pack.

    Directory arcnames end with "/" and are only listed when empty.
    """
    members: list[tuple[Path, str]] = []
    for path in sorted(directory.rglob("*")):
        rel = _as_rel_arcname(directory, path)
        if rel == METADATA_FILENAME:
            continue
        if path.is_dir():
            if not any(path.iterdir()):
                members.append((path, rel + "/"))
            continue
        if path.is_file():
            members.append((path, rel))
    return members


def write_zip(directory: Path, output: Path, leading_member: str | None = None) -> int:
    """Pack *directory* into *output* (which must not exist) and return the member count."""
    members = collect_members(directory)
    if leading_member is not None:
        first = [m for m in members if m[1] == leading_member]
        rest = [m for m in members if m[1] != leading_member]
        members = first + rest

    # "x" mode refuses to clobber a file that appeared after the caller's check
    with zipfile.ZipFile(
        output, "x", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
    ) as z:
        for fs_path, arcname in members:
            if arcname.endswith("/"):
                z.writestr(zipfile.ZipInfo(arcname), b"")
                continue
            compress = zipfile.ZIP_STORED if arcname == leading_member else zipfile.ZIP_DEFLATED
            z.write(fs_path, arcname=arcname, compress_type=compress)
    return len(members)
