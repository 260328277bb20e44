from __future__ import annotations

import io
from typing import TYPE_CHECKING

from workspace_snapshot.fences import allocate_fence

if TYPE_CHECKING:
    from collections.abc import Sequence

    from workspace_snapshot.config import FileRecord


def markdown_section(rec: FileRecord) -> str:
    """Render one record as a level-3 heading followed by its fenced content.

    The content is written verbatim. Validity of the block relies only on the fence
    being longer than any backtick run inside the content.

    Args:
        rec (FileRecord): the record to render

    Returns:
        str: the section, ending with the closing fence and a newline
    """
    fence = allocate_fence(rec.content)
    return f"### {rec.rel}\n{fence}{rec.extension}\n{rec.content}\n{fence}\n"


def build_markdown(recs: Sequence[FileRecord]) -> str:
    """Build the Markdown transcript of a snapshot.

    Sections follow the order of `recs` and are separated by a blank line.

    Args:
        recs (Sequence[FileRecord]): the records of the snapshot

    Returns:
        str: the transcript, or an empty string when there is no record
    """
    out = io.StringIO()
    for idx, rec in enumerate(recs):
        if idx:
            out.write("\n")
        out.write(markdown_section(rec))
    return out.getvalue()
