from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from workspace_snapshot import __version__, cli
from workspace_snapshot.exceptions import ConfigError
from workspace_snapshot.ignore_filter import IgnoreFilter
from workspace_snapshot.settings import Settings
from workspace_snapshot.snapshot import SnapshotSession

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_parses_patterns_and_limits(tmp_path: Path) -> None:
    max_file_size = 1234
    settings = cli.parse_args(
        [
            "--root",
            str(tmp_path),
            "--ignore-pattern",
            "*.env",
            "--ignore-pattern",
            "dist/",
            "--ignore-file",
            ".dockerignore",
            "--max-file-size",
            str(max_file_size),
            "--max-workers",
            "2",
        ],
    )

    assert settings.root == tmp_path
    assert settings.ignore_patterns == ["*.env", "dist/"]
    assert settings.ignore_files == [".dockerignore"]
    assert settings.max_file_size == max_file_size
    assert settings.max_workers == 2  # noqa: PLR2004


@pytest.mark.unit
def test_parse_args_defaults_keep_gitignore() -> None:
    settings = cli.parse_args([])

    assert settings.ignore_files == [".gitignore"]
    assert settings.ignore_patterns == []


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert __version__ in captured.out


@pytest.mark.unit
def test_parse_args_reads_config_file(tmp_path: Path) -> None:
    config = tmp_path / "snapshot.yaml"
    config.write_text("ignore-patterns:\n  - '*.lock'\nmax-file-size: 100\n", encoding="utf-8")

    settings = cli.parse_args(["--config", str(config), "--max-file-size", "200"])

    assert settings.ignore_patterns == ["*.lock"]
    assert settings.max_file_size == 200  # noqa: PLR2004


@pytest.mark.unit
def test_parse_args_rejects_bad_config(tmp_path: Path) -> None:
    config = tmp_path / "snapshot.yaml"
    config.write_text("unknown: 1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        cli.parse_args(["--config", str(config)])


@pytest.mark.unit
def test_exclude_own_outputs_inside_root(tmp_path: Path) -> None:
    settings = Settings(root=tmp_path, html=tmp_path / "site" / "preview.html", ignore_patterns=["*.env"])

    updated = cli.exclude_own_outputs(settings)

    assert updated.ignore_patterns == ["*.env", "/generated_markdown.md", "/site/preview.html"]
    assert settings.ignore_patterns == ["*.env"]


@pytest.mark.unit
def test_exclude_own_outputs_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "project"
    root.mkdir()
    settings = Settings(root=root, output=tmp_path / "elsewhere.md")

    assert cli.exclude_own_outputs(settings) is settings


@pytest.mark.unit
def test_main_reports_missing_root(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["--root", str(tmp_path / "missing"), "--output", str(tmp_path / "out.md")])

    assert exit_code == 1
    assert "Error generating markdown: No workspace folder open" in capsys.readouterr().err
    assert not (tmp_path / "out.md").exists()


@pytest.mark.unit
def test_main_reports_invalid_configuration(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["--root", str(tmp_path), "--max-workers", "0"])

    assert exit_code == 2  # noqa: PLR2004
    assert "Invalid configuration" in capsys.readouterr().err


@pytest.mark.unit
def test_exclude_own_outputs_escapes_glob_characters(tmp_path: Path) -> None:
    settings = Settings(root=tmp_path, output=tmp_path / "out[1]*.md")

    updated = cli.exclude_own_outputs(settings)

    assert updated.ignore_patterns == [r"/out\[1\]\*.md"]
    ig = IgnoreFilter(updated.ignore_patterns)
    assert ig.ignores("out[1]*.md")
    assert not ig.ignores("out1.md")
    assert not ig.ignores("out1_notes.md")


@pytest.mark.unit
def test_main_reports_write_failures(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    (tmp_path / "a.txt").write_text("alpha", encoding="utf-8")
    mocker.patch.object(SnapshotSession, "download", side_effect=OSError("No space left on device"))

    exit_code = cli.main(["--root", str(tmp_path)])

    assert exit_code == 1
    assert "Error generating markdown: No space left on device" in capsys.readouterr().err


@pytest.mark.unit
def test_main_reports_unwritable_preview(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.txt").write_text("alpha", encoding="utf-8")
    (tmp_path / "blocker").write_text("not a directory", encoding="utf-8")

    exit_code = cli.main(["--root", str(tmp_path), "--html", str(tmp_path / "blocker" / "preview.html")])

    assert exit_code == 1
    assert "Error generating markdown:" in capsys.readouterr().err
    assert not (tmp_path / "generated_markdown.md").exists()
