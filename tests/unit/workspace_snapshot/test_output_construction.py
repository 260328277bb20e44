from __future__ import annotations

import pytest

from workspace_snapshot.config import ContentSource, FileRecord
from workspace_snapshot.output_construction import build_markdown, markdown_section


@pytest.mark.unit
def test_build_markdown_empty_is_empty() -> None:
    assert build_markdown([]) == ""


@pytest.mark.unit
def test_build_markdown_renders_headers_and_fences() -> None:
    recs = [
        FileRecord(rel="a.txt", content="hello"),
        FileRecord(rel="src/b.PY", content="print(1)"),
    ]

    output = build_markdown(recs)

    assert output == "### a.txt\n```txt\nhello\n```\n\n### src/b.PY\n```py\nprint(1)\n```\n"


@pytest.mark.unit
def test_build_markdown_keeps_input_order() -> None:
    recs = [FileRecord(rel=name, content=name) for name in ("z.md", "a.md", "m.md")]

    output = build_markdown(recs)
    headings = [ln.removeprefix("### ") for ln in output.splitlines() if ln.startswith("### ")]

    assert headings == ["z.md", "a.md", "m.md"]


@pytest.mark.unit
def test_markdown_section_grows_fence_around_backticks() -> None:
    content = "# Title\n\n```python\nprint('x')\n```\n"
    rec = FileRecord(rel="b.md", content=content)

    section = markdown_section(rec)

    assert section.startswith("### b.md\n````md\n")
    assert section.endswith(f"\n{content}\n````\n")


@pytest.mark.unit
def test_markdown_section_without_extension_has_empty_info_string() -> None:
    rec = FileRecord(rel="Makefile", content="all:\n\techo hi")

    assert markdown_section(rec) == "### Makefile\n```\nall:\n\techo hi\n```\n"


@pytest.mark.unit
def test_markdown_section_content_is_not_escaped() -> None:
    content = "<html> & *stars* _under_ \\back"
    rec = FileRecord(rel="page.html", content=content)

    assert f"\n{content}\n" in markdown_section(rec)


@pytest.mark.unit
def test_document_records_use_their_extension() -> None:
    rec = FileRecord(rel="docs/Spec.DOCX", content="Some prose", source=ContentSource.DOCUMENT)

    assert markdown_section(rec).startswith("### docs/Spec.DOCX\n```docx\nSome prose\n")
