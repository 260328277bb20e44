from pathlib import Path

import docx
import pytest

from workspace_snapshot import cli


def build_workspace(root: Path) -> None:
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "src" / "pkg" / "core.py").write_text("def run():\n    return '`x`'\n", encoding="utf-8")
    (root / "README.md").write_text("# Title\n\n```bash\nmake\n```\n", encoding="utf-8")
    (root / "node_modules" / "lib" / "index.js").write_text("module.exports = {}", encoding="utf-8")
    (root / "secret.env").write_text("API_KEY=do-not-leak", encoding="utf-8")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    (root / "huge.txt").write_text("z" * 600_001, encoding="utf-8")
    (root / ".gitignore").write_text("node_modules/\n", encoding="utf-8")
    document = docx.Document()
    document.add_paragraph("Architecture overview")
    document.save(str(root / "docs" / "design.docx"))


@pytest.mark.end2end
def test_end_to_end_markdown_export(tmp_path: Path) -> None:
    build_workspace(tmp_path)
    output = tmp_path / "export.md"
    html = tmp_path / "preview.html"

    exit_code = cli.main(
        [
            "--root",
            str(tmp_path),
            "--output",
            str(output),
            "--html",
            str(html),
            "--ignore-pattern",
            "*.env",
        ],
    )

    assert exit_code == 0
    content = output.read_text(encoding="utf-8")
    headings = sorted(ln.removeprefix("### ") for ln in content.splitlines() if ln.startswith("### "))
    assert headings == [".gitignore", "README.md", "docs/design.docx", "src/pkg/core.py"]
    assert "````md\n# Title" in content
    assert "```docx\nArchitecture overview\n```" in content
    assert "do-not-leak" not in content
    assert "module.exports" not in content
    assert "zzzz" not in content

    page = html.read_text(encoding="utf-8")
    assert "<h3>docs/design.docx</h3>" in page
    assert "language-python" in page


@pytest.mark.end2end
def test_end_to_end_rerun_does_not_include_previous_output(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    (tmp_path / "a.txt").write_text("alpha", encoding="utf-8")

    assert cli.main(["--root", str(tmp_path)]) == 0
    assert cli.main(["--root", str(tmp_path)]) == 0

    content = (tmp_path / "generated_markdown.md").read_text(encoding="utf-8")
    assert content == "### a.txt\n```txt\nalpha\n```\n"
    assert "files=1" in capsys.readouterr().out
