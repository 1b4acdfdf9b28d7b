from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from gitument.config import (
    CONFIG_FILENAME,
    config_path,
    load_config,
    remove_config,
    write_config,
    write_default_config,
)
from gitument.errors import ConfigError
from gitument.types import ArtifactFormat, WorkflowConfig


def test_defaults_without_file(tmp_path: Path) -> None:
    cfg = load_config(tmp_path)
    assert cfg.extract_dir_pattern == "{filename}_extracted"
    assert cfg.auto_cleanup is True
    assert cfg.supported_types == [ArtifactFormat.HWPX, ArtifactFormat.DOCX]


def test_load_from_file(tmp_path: Path) -> None:
    config_path(tmp_path).write_text(
        json.dumps(
            {
                "version": "1.0.0",
                "extractDirPattern": "{filename}.d",
                "autoCleanup": False,
                "supportedTypes": ["docx"],
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(tmp_path)
    assert cfg.extract_dir_name("report") == "report.d"
    assert cfg.auto_cleanup is False
    assert cfg.supported_types == [ArtifactFormat.DOCX]


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        '{"extractDirPattern": "no-placeholder"}',
        '{"supportedTypes": ["pdf"]}',
        '{"autoCleanup": "yes"}',
        '{"extractDirPattern": "sub/{filename}"}',
    ],
)
def test_invalid_file_raises(tmp_path: Path, content: str) -> None:
    config_path(tmp_path).write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_write_default_does_not_clobber(tmp_path: Path) -> None:
    assert write_default_config(tmp_path) == tmp_path / CONFIG_FILENAME
    write_config(tmp_path, WorkflowConfig(extract_dir_pattern="x_{filename}"))
    assert write_default_config(tmp_path) is None
    assert load_config(tmp_path).extract_dir_pattern == "x_{filename}"

    data = json.loads(config_path(tmp_path).read_text(encoding="utf-8"))
    assert data["supportedTypes"] == ["hwpx", "docx"]

    assert remove_config(tmp_path) is True
    assert remove_config(tmp_path) is False


@pytest.mark.parametrize(
    "pattern, dir_name, stem",
    [
        ("{filename}_extracted", "report_extracted", "report"),
        ("{filename}_extracted", "report", None),
        ("src-{filename}", "src-my_doc", "my_doc"),
        ("{filename}.d", "a.b.d", "a.b"),
        ("{filename}_extracted", "_extracted", None),
    ],
)
def test_strip_pattern(pattern: str, dir_name: str, stem: str | None) -> None:
    assert WorkflowConfig(extract_dir_pattern=pattern).strip_pattern(dir_name) == stem


def test_config_is_immutable() -> None:
    cfg = WorkflowConfig()
    with pytest.raises(ValidationError):
        cfg.auto_cleanup = False
