from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from workspace_snapshot.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    DirectoryPruner = Callable[[str], bool]

SNIFF_BYTES = 8000
CONTROL_BYTE_RATIO = 0.3
# Control bytes that routinely show up in text files: \b \t \n \f \r and ESC.
_TEXT_CONTROL_BYTES = frozenset({8, 9, 10, 12, 13, 27})


def normalize_path(raw: str) -> str:
    """Canonicalize a root-relative path to its posix form.

    Every platform separator is replaced with `/`, then `.` and `..` segments are
    collapsed lexically. The filesystem is never touched.

    Args:
        raw (str): the path to normalize, relative to the traversal root

    Returns:
        str: the normalized path; `normalize_path(normalize_path(p)) == normalize_path(p)`
    """
    text = raw.replace("\\", "/")
    if os.sep != "/":
        text = text.replace(os.sep, "/")
    if os.altsep and os.altsep != "/":
        text = text.replace(os.altsep, "/")
    if not text:
        return "."
    return posixpath.normpath(text)


def relpath(path: Path, root: Path) -> str:
    """Send the normalized relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the normalized original path.
    """
    try:
        return normalize_path(str(path.relative_to(root)))
    except ValueError:
        return normalize_path(str(path))


def looks_binary(chunk: bytes) -> bool:
    """Classify a byte sample as binary.

    A NUL byte anywhere in the sample is conclusive. Otherwise the sample is binary when
    more than `CONTROL_BYTE_RATIO` of it is made of control bytes that text files do
    not normally contain.

    Args:
        chunk (bytes): the sampled prefix of a file

    Returns:
        bool: True if the sample looks binary
    """
    if not chunk:
        return False
    if b"\x00" in chunk:
        return True
    control = sum(1 for b in chunk if (b < 32 and b not in _TEXT_CONTROL_BYTES) or b == 127)  # noqa: PLR2004
    return control / len(chunk) > CONTROL_BYTE_RATIO


def sniff_binary(path: Path, nbytes: int = SNIFF_BYTES) -> bool:
    """Check if path points to a binary file by sampling its first bytes.

    Args:
        path (Path): path to test.
        nbytes (int, optional): number of bytes to sample. Defaults to 8000.

    Raises:
        OSError: if the file cannot be opened or read.

    Returns:
        bool: True if the file is probably binary, False otherwise.
    """
    with path.open("rb") as f:
        chunk = f.read(nbytes)
    return looks_binary(chunk)


def read_text(path: Path) -> str:
    """Read a whole file as UTF-8, replacing undecodable bytes.

    Line endings are kept as they are on disk.

    Args:
        path (Path): the file path to read

    Returns:
        str: the file content
    """
    with path.open(encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def walk_files(root: Path, prune: DirectoryPruner | None = None) -> Iterator[Path]:
    """Walk the directory tree rooted at `root` and yield every file.

    Directories are traversed but never yielded. When `prune` returns True for a
    directory's normalized relative path, the walk does not descend into it.
    Unreadable subdirectories are logged and skipped.

    Args:
        root (Path): the root directory to walk
        prune (DirectoryPruner | None): optional predicate on relative directory paths

    Yields:
        Path: each file found under `root`
    """

    def on_error(err: OSError) -> None:
        logger.warning("directory_unreadable", path=str(err.filename), error=str(err))

    for current, dirs, files in os.walk(root, onerror=on_error):
        base = Path(current)
        if prune is not None:
            dirs[:] = [d for d in dirs if not prune(relpath(base / d, root))]
        for f in files:
            yield base / f
