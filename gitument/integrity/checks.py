"""Integrity helpers: archive validation and content digests.

`validate_archive` re-reads every member of a produced archive so that a
corrupt pack fails loudly. The digest helpers compare an artifact with a
managed directory member by member, ignoring member order.
"""

from __future__ import annotations

import hashlib
import zipfile
import zlib
from pathlib import Path

from gitument.detect.zip_layout import is_zip_container
from gitument.errors import CorruptArchive, NotAccessible
from gitument.package.zip import collect_members
from gitument.types import SyncState


def sha256(path: Path) -> str:
    """Return the hex SHA-256 of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def validate_archive(path: Path) -> bool:
    """Raise CorruptArchive unless every member of *path* decompresses with a good CRC."""
    if not path.exists():
        raise NotAccessible(f"File does not exist: {path}", path)
    if not is_zip_container(path):
        raise CorruptArchive(f"Not a valid zip file: {path}", path)
    try:
        with zipfile.ZipFile(path) as zf:
            infos = zf.infolist()
            if not infos:
                raise CorruptArchive(f"Archive has no entries: {path}", path)
            for info in infos:
                try:
                    with zf.open(info) as src:
                        while src.read(1024 * 1024):
                            pass
                except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
                    raise CorruptArchive(
                        f"Corrupt entry {info.filename} in {path}: {e}", path, info.filename
                    ) from e
    except zipfile.BadZipFile as e:
        raise CorruptArchive(f"Cannot open archive {path}: {e}", path) from e
    return True


def archive_digests(path: Path) -> dict[str, str]:
    digests: dict[str, str] = {}
    with zipfile.ZipFile(path) as zf:
        for info in zf.infolist():
            if info.is_dir():
                continue
            digests[info.filename] = hashlib.sha256(zf.read(info)).hexdigest()
    return digests


def directory_digests(directory: Path) -> dict[str, str]:
    return {
        arcname: sha256(fs_path)
        for fs_path, arcname in collect_members(directory)
        if not arcname.endswith("/")
    }


def sync_state(artifact: Path, directory: Path) -> SyncState:
    if not artifact.is_file():
        return SyncState.ARTIFACT_MISSING
    try:
        same = archive_digests(artifact) == directory_digests(directory)
    except (zipfile.BadZipFile, zlib.error, EOFError):
        return SyncState.DIVERGED
    return SyncState.IN_SYNC if same else SyncState.DIVERGED
