"""Text extraction for word-processor documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

import docx
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from workspace_snapshot.config import register_file_processor
from workspace_snapshot.exceptions import DocumentExtractionError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from docx.document import Document


def placeholder_for(path: Path) -> str:
    """Content used for a valid document without any text."""
    return f"[No text content found in {path.name}]"


def _table_text(table: Table) -> Iterator[str]:
    for row in table.rows:
        for cell in row.cells:
            for paragraph in cell.paragraphs:
                yield paragraph.text
            for inner in cell.tables:
                yield from _table_text(inner)


def _body_text(document: Document) -> Iterator[str]:
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            yield Paragraph(child, document).text
        elif child.tag == qn("w:tbl"):
            yield from _table_text(Table(child, document))


@register_file_processor(".docx")
def extract_docx(path: Path) -> str:
    """Extract the raw text of a `.docx` document.

    Paragraphs (including those inside tables) are kept in body order and separated
    by a blank line. A document that parses but holds no text yields a placeholder
    rather than an empty string.

    Args:
        path (Path): the document to read

    Raises:
        DocumentExtractionError: if the file is not a readable `.docx` package

    Returns:
        str: the extracted text, or the placeholder from `placeholder_for`
    """
    try:
        document = docx.Document(str(path))
        paragraphs = [text for text in _body_text(document) if text.strip()]
    except Exception as e:
        raise DocumentExtractionError(file=path, reason=str(e) or type(e).__name__) from e
    if not paragraphs:
        return placeholder_for(path)
    return "\n\n".join(paragraphs)
