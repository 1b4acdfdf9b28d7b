from __future__ import annotations

import logging
from pathlib import Path

import pytest
from conftest import DOCX_MEMBERS, HWPX_MEMBERS, write_zip

from gitument.detect.base import FORMATS, classify_by_extension, detect_file_type, is_supported_file
from gitument.detect.zip_layout import is_zip_container, validate_structure
from gitument.errors import CorruptArchive, MissingRequiredMember, NotAccessible, UnrecognizedFormat
from gitument.types import ArtifactFormat


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.hwpx", ArtifactFormat.HWPX),
        ("a.HWPX", ArtifactFormat.HWPX),
        ("a.docx", ArtifactFormat.DOCX),
        ("dir/a.DocX", ArtifactFormat.DOCX),
        ("a.txt", ArtifactFormat.UNKNOWN),
        ("a.pdf", ArtifactFormat.UNKNOWN),
        ("a", ArtifactFormat.UNKNOWN),
    ],
)
def test_classify_by_extension(name: str, expected: ArtifactFormat) -> None:
    assert classify_by_extension(name) is expected


def test_every_format_has_a_table_entry() -> None:
    recognized = {f for f in ArtifactFormat if f is not ArtifactFormat.UNKNOWN}
    assert set(FORMATS) == recognized


def test_is_supported_file_respects_subset() -> None:
    assert is_supported_file("x.hwpx")
    assert is_supported_file("x.docx", [ArtifactFormat.DOCX])
    assert not is_supported_file("x.hwpx", [ArtifactFormat.DOCX])
    assert not is_supported_file("x.txt")


def test_zip_signature(tmp_path: Path, docx_file: Path) -> None:
    plain = tmp_path / "plain.docx"
    plain.write_bytes(b"not a zip")
    assert is_zip_container(docx_file)
    assert not is_zip_container(plain)
    assert not is_zip_container(tmp_path / "missing.docx")


def test_detects_docx_and_hwpx(docx_file: Path, hwpx_file: Path) -> None:
    assert detect_file_type(docx_file) is ArtifactFormat.DOCX
    assert detect_file_type(hwpx_file) is ArtifactFormat.HWPX


def test_missing_file_is_not_accessible(tmp_path: Path) -> None:
    with pytest.raises(NotAccessible):
        detect_file_type(tmp_path / "nonexistent.hwpx")


def test_txt_is_never_recognized_even_with_zip_content(tmp_path: Path) -> None:
    txt = write_zip(tmp_path / "notes.txt", DOCX_MEMBERS)
    with pytest.raises(UnrecognizedFormat):
        detect_file_type(txt)


def test_non_zip_document_is_unrecognized(tmp_path: Path) -> None:
    fake = tmp_path / "fake.docx"
    fake.write_text("hello", encoding="utf-8")
    with pytest.raises(UnrecognizedFormat):
        detect_file_type(fake)


def test_hwpx_without_manifest_fails(tmp_path: Path) -> None:
    members = {k: v for k, v in HWPX_MEMBERS.items() if k != "META-INF/manifest.xml"}
    hwpx = write_zip(tmp_path / "broken.hwpx", members)
    with pytest.raises(MissingRequiredMember) as exc:
        detect_file_type(hwpx)
    assert exc.value.member == "META-INF/manifest.xml"


def test_docx_reports_first_missing_member(tmp_path: Path) -> None:
    docx = write_zip(tmp_path / "broken.docx", {"[Content_Types].xml": b"<Types/>"})
    with pytest.raises(MissingRequiredMember, match="word/document.xml"):
        validate_structure(docx, ArtifactFormat.DOCX)


def test_hwpx_without_content_member_only_warns(tmp_path: Path, caplog) -> None:
    hwpx = write_zip(tmp_path / "bare.hwpx", {"META-INF/manifest.xml": b"<manifest/>"})
    with caplog.at_level(logging.WARNING, logger="gitument"):
        assert detect_file_type(hwpx) is ArtifactFormat.HWPX
    assert any("no content member" in r.getMessage() for r in caplog.records)


def test_truncated_archive_is_corrupt(tmp_path: Path) -> None:
    bad = tmp_path / "cut.docx"
    bad.write_bytes(b"PK\x03\x04" + b"\x00" * 10)
    with pytest.raises(CorruptArchive):
        validate_structure(bad, ArtifactFormat.DOCX)
