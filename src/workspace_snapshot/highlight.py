"""Syntax-highlighted HTML rendering of snapshot records for on-screen preview."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import guess_lexer, guess_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pygments.lexer import Lexer

    from workspace_snapshot.config import FileRecord

PLAINTEXT = "plaintext"
PREVIEW_STYLE = "monokai"
CSS_SCOPE = ".highlight"

_HTML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
})

_FORMATTER = HtmlFormatter(nowrap=True)


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters in a single pass."""
    return text.translate(_HTML_ESCAPES)


def detect_lexer(rel: str, content: str) -> Lexer | None:
    """Pick a lexer for `content`, or None when no lexer claims any confidence.

    The file name narrows the candidates first; when no lexer matches the name, the
    content alone is analysed.

    Args:
        rel (str): the record's relative path, used as a filename hint
        content (str): the text to analyse

    Returns:
        Lexer | None: the best guess, None for plain text
    """
    try:
        lexer = guess_lexer_for_filename(rel, content, stripnl=False)
    except ClassNotFound:
        try:
            lexer = guess_lexer(content, stripnl=False)
        except ClassNotFound:
            return None
    if isinstance(lexer, TextLexer):
        return None
    return lexer


def lexer_language(lexer: Lexer | None) -> str:
    """Short language name used in the code block's class annotation."""
    if lexer is None:
        return PLAINTEXT
    if lexer.aliases:
        return lexer.aliases[0]
    return lexer.name.lower().replace(" ", "-")


def highlight_record(rec: FileRecord) -> tuple[str, str]:
    """Return the highlighted body and the language of one record.

    Document content is escaped and marked as plain text since extracted prose is
    not source code. Everything else goes through language detection; pygments
    escapes the tokens it emits.
    """
    if rec.is_document:
        return escape_html(rec.content), PLAINTEXT
    lexer = detect_lexer(rec.rel, rec.content)
    if lexer is None:
        return escape_html(rec.content), PLAINTEXT
    return highlight(rec.content, lexer, _FORMATTER), lexer_language(lexer)


def html_section(rec: FileRecord) -> str:
    body, language = highlight_record(rec)
    return (
        f"<h3>{escape_html(rec.rel)}</h3>\n"
        f'<pre class="{CSS_SCOPE[1:]}"><code class="language-{escape_html(language)}">{body}</code></pre>\n'
    )


def build_html(recs: Sequence[FileRecord]) -> str:
    """Build the highlighted HTML fragment of a snapshot.

    Sections follow the order of `recs`, which must be the same sequence given to
    `build_markdown` for the preview to match the transcript.

    Args:
        recs (Sequence[FileRecord]): the records of the snapshot

    Returns:
        str: an HTML fragment (no document wrapper), empty when there is no record
    """
    return "".join(html_section(rec) for rec in recs)


def stylesheet(style: str = PREVIEW_STYLE) -> str:
    """CSS rules for the token classes emitted by `build_html`."""
    return HtmlFormatter(style=style).get_style_defs(CSS_SCOPE)


def render_preview_page(fragment: str, *, title: str = "Recursive Markdown Preview") -> str:
    """Wrap an HTML fragment into a standalone preview page.

    Args:
        fragment (str): the output of `build_html`, or a plain status message
        title (str): the page title

    Returns:
        str: a complete HTML document
    """
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{escape_html(title)}</title>
<style>
body {{ font-family: Arial, sans-serif; padding: 10px; }}
pre {{ padding: 10px; border-radius: 5px; overflow-x: auto; }}
{stylesheet()}
</style>
</head>
<body>
<div id="content">{fragment}</div>
</body>
</html>
"""
