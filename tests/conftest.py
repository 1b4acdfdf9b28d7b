from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

DOCX_MEMBERS = {
    "[Content_Types].xml": b'<?xml version="1.0"?><Types/>',
    "word/document.xml": b'<?xml version="1.0"?><w:document>hello</w:document>',
    "word/media/image1.png": bytes(range(256)) * 4,
}

HWPX_MEMBERS = {
    "mimetype": b"application/hwp+zip",
    "META-INF/manifest.xml": b'<?xml version="1.0"?><manifest/>',
    "Contents/content.hpf": b'<?xml version="1.0"?><opf:package/>',
    "Contents/section0.xml": "<hs:sec>한글</hs:sec>".encode("utf-8"),
}


def write_zip(path: Path, members: dict[str, bytes], dirs: tuple[str, ...] = ()) -> Path:
    """Write a zip with *members* (and optional explicit directory entries)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as z:
        for d in dirs:
            z.writestr(zipfile.ZipInfo(d), b"")
        for name, data in members.items():
            z.writestr(name, data)
    return path


def read_members(path: Path) -> dict[str, bytes]:
    with zipfile.ZipFile(path) as z:
        return {i.filename: z.read(i) for i in z.infolist() if not i.is_dir()}


@pytest.fixture()
def docx_file(tmp_path: Path) -> Path:
    return write_zip(tmp_path / "report.docx", DOCX_MEMBERS)


@pytest.fixture()
def hwpx_file(tmp_path: Path) -> Path:
    return write_zip(tmp_path / "memo.hwpx", HWPX_MEMBERS, dirs=("META-INF/",))
