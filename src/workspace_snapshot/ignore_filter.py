"""Gitignore-style path exclusion built from configured patterns and ignore-files."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import pathspec

from workspace_snapshot.file_manipulation import normalize_path
from workspace_snapshot.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

_GLOB_SPECIALS = re.compile(r"([\\*?\[\]!#])")


class IgnoreFilter:
    """Composite predicate over root-relative paths.

    Patterns keep gitignore semantics (`*`, `**`, anchors, negation, comments and
    trailing-slash directory rules); later sources can re-include what earlier ones
    excluded.
    """

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self.lines: list[str] = [ln.rstrip("\r\n") for ln in lines]
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.lines)

    def ignores(self, rel: str) -> bool:
        """Return True when the file at `rel` is excluded."""
        path = normalize_path(rel)
        if path in {".", ""}:
            return False
        return self._spec.match_file(path)

    def ignores_dir(self, rel: str) -> bool:
        """Return True when the directory at `rel` is excluded as a whole."""
        path = normalize_path(rel)
        if path in {".", ""}:
            return False
        return self._spec.match_file(path + "/")


def escape_pattern(rel: str) -> str:
    """Turn a literal relative path into a pattern matching only that path."""
    return _GLOB_SPECIALS.sub(r"\\\1", rel)


def read_ignore_file(path: Path) -> list[str]:
    """Read the patterns of one ignore-file.

    A missing or unreadable file contributes no pattern; the condition is logged.

    Args:
        path (Path): the ignore-file to read

    Returns:
        list[str]: the raw lines of the file
    """
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("ignore_file_missing", path=str(path), error=str(e))
        return []


def build_ignore_filter(
    root: Path,
    patterns: Sequence[str] = (),
    ignore_files: Sequence[str] = (".gitignore",),
) -> IgnoreFilter:
    """Build the ignore predicate for a traversal rooted at `root`.

    Args:
        root (Path): the traversal root, where ignore-files are looked up
        patterns (Sequence[str]): explicit gitignore-syntax patterns, applied first
        ignore_files (Sequence[str]): ignore-file names relative to `root`, in order

    Returns:
        IgnoreFilter: the composite predicate
    """
    lines: list[str] = [p for p in patterns if p is not None]
    for name in ignore_files:
        lines.extend(read_ignore_file(root / name))
    return IgnoreFilter(lines)
