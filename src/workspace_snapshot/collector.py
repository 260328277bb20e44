"""Enumeration and admission of the files that take part in a snapshot."""

from __future__ import annotations

import os
import stat
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

# Imported for its registration side effect: `.docx` gets a content extractor.
import workspace_snapshot.documents  # noqa: F401
from workspace_snapshot.config import ContentSource, FileRecord, file_processor_for
from workspace_snapshot.exceptions import DocumentExtractionError, EnumerationError, NoWorkspaceRootError
from workspace_snapshot.file_manipulation import read_text, relpath, sniff_binary, walk_files
from workspace_snapshot.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from workspace_snapshot.ignore_filter import IgnoreFilter

    BinaryDetector = Callable[[Path], bool]


def default_worker_count() -> int:
    """Worker cap used when none is configured, same bound as `ThreadPoolExecutor`."""
    return min(32, (os.cpu_count() or 1) + 4)


def ensure_root(root: Path) -> None:
    """Check that `root` is a directory that can be listed.

    Args:
        root (Path): the traversal root

    Raises:
        NoWorkspaceRootError: if `root` does not exist or is not a directory
        EnumerationError: if `root` exists but cannot be listed
    """
    if not root.is_dir():
        raise NoWorkspaceRootError(folder=root)
    try:
        with os.scandir(root):
            pass
    except OSError as e:
        raise EnumerationError(folder=root, reason=str(e)) from e


def iter_candidates(root: Path, ignore_filter: IgnoreFilter) -> Iterator[tuple[Path, str]]:
    """Yield `(path, rel)` for every file under `root` that is not ignored.

    Directories excluded as a whole are pruned, so nothing below them is visited.
    """
    for path in walk_files(root, prune=ignore_filter.ignores_dir):
        rel = relpath(path, root)
        if ignore_filter.ignores(rel):
            continue
        yield path, rel


def admit_file(
    candidate: tuple[Path, str],
    *,
    max_file_size: int,
    is_binary: BinaryDetector = sniff_binary,
) -> FileRecord | None:
    """Turn one candidate file into a record, or None when it is skipped.

    Failures are logged and contained here: a single unreadable file never aborts
    the snapshot.

    Args:
        candidate (tuple[Path, str]): absolute path and normalized relative path
        max_file_size (int): files strictly larger than this are skipped
        is_binary (BinaryDetector): classifier for files without a registered extractor

    Returns:
        FileRecord | None: the admitted record, or None
    """
    path, rel = candidate
    try:
        rel.encode("utf-8")
    except UnicodeEncodeError:
        shown = rel.encode("utf-8", errors="backslashreplace").decode("utf-8")
        logger.warning("file_name_undecodable", path=shown)
        return None
    try:
        st = path.stat()
    except OSError as e:
        logger.error("file_stat_failed", path=rel, error=str(e))
        return None
    if not stat.S_ISREG(st.st_mode):
        return None
    if st.st_size > max_file_size:
        logger.info("skipping_large_file", path=rel, size=st.st_size, limit=max_file_size)
        return None

    processor = file_processor_for(path)
    if processor is not None:
        try:
            content = processor(path)
        except DocumentExtractionError as e:
            logger.error("document_extraction_failed", path=rel, error=str(e))
            return None
        return FileRecord(rel=rel, content=content, source=ContentSource.DOCUMENT)

    try:
        if is_binary(path):
            logger.debug("skipping_binary_file", path=rel)
            return None
        content = read_text(path)
    except OSError as e:
        logger.error("file_read_failed", path=rel, error=str(e))
        return None
    return FileRecord(rel=rel, content=content)


def collect(
    root: Path,
    ignore_filter: IgnoreFilter,
    max_file_size: int,
    *,
    max_workers: int | None = None,
    is_binary: BinaryDetector = sniff_binary,
) -> tuple[FileRecord, ...]:
    """Collect the records of every admitted file under `root`.

    Enumeration is synchronous; admission of each file runs on a bounded thread pool
    and the results are joined once all are done. Skipped and failed files are simply
    absent from the result. At most one record exists per relative path.

    Args:
        root (Path): the traversal root
        ignore_filter (IgnoreFilter): exclusion predicate over relative paths
        max_file_size (int): size threshold in bytes
        max_workers (int | None): worker cap, `default_worker_count()` when None
        is_binary (BinaryDetector): pluggable text/binary classifier

    Raises:
        NoWorkspaceRootError: if `root` is not a directory
        EnumerationError: if `root` cannot be listed

    Returns:
        tuple[FileRecord, ...]: the admitted records, possibly empty
    """
    root = Path(root)
    ensure_root(root)
    candidates = list(iter_candidates(root, ignore_filter))
    workers = max(1, max_workers or default_worker_count())
    admit = partial(admit_file, max_file_size=max_file_size, is_binary=is_binary)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        admitted = list(pool.map(admit, candidates))

    seen: set[str] = set()
    records: list[FileRecord] = []
    for rec in admitted:
        if rec is None or rec.rel in seen:
            continue
        seen.add(rec.rel)
        records.append(rec)
    return tuple(records)
