"""Safe archive extraction helpers.

Guards against common archive attacks:
- Zip Slip (../ traversal)
- Absolute paths
- Oversized members (MAX_MEMBER_BYTES)

Every member is checked before anything is written, so a hostile archive
leaves the destination untouched.
"""

from __future__ import annotations

import shutil
import zipfile
import zlib
from collections.abc import Iterable
from pathlib import Path

from gitument.errors import CorruptArchive, PathTraversal

MAX_MEMBER_BYTES = 128 * 1024 * 1024  # per member


def _is_within(base: Path, target: Path) -> bool:
    try:
        target.relative_to(base)
        return True
    except ValueError:
        return False


def safe_member_path(base: Path, member_name: str) -> Path:
    """Resolve *member_name* under *base*, raising PathTraversal if it escapes."""
    root = Path(base).resolve()
    target = (root / member_name).resolve()
    if not _is_within(root, target):
        raise PathTraversal(base, member_name)
    return target


def safe_extract_zip(zf: zipfile.ZipFile, dest: Path, reserved: Iterable[str] = ()) -> int:
    """Write every member of *zf* under *dest* and return the number of files written.

    Members named in *reserved* (top-level names the caller writes itself)
    and members resolving to *dest* itself are rejected as CorruptArchive.
    """
    dest.mkdir(parents=True, exist_ok=True)
    source = zf.filename or dest
    root = dest.resolve()
    blocked = {(root / name).resolve() for name in reserved}

    # Materialize and check all targets before the first write
    plan = []
    for m in zf.infolist():
        target = safe_member_path(dest, m.filename)
        if target == root or target in blocked:
            raise CorruptArchive(f"Reserved member name: {m.filename}", source, m.filename)
        if m.file_size > MAX_MEMBER_BYTES:
            raise CorruptArchive(
                f"Member too large: {m.filename} ({m.file_size} bytes)", source, m.filename
            )
        plan.append((m, target))

    written = 0
    for m, target in plan:
        if m.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with zf.open(m) as src, open(target, "wb") as out:
                shutil.copyfileobj(src, out)
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
            raise CorruptArchive(
                f"Cannot decompress member {m.filename}: {e}", source, m.filename
            ) from e
        written += 1
    return written
