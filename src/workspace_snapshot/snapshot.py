"""Snapshot value, pipeline entry point and the generate/download session."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from workspace_snapshot.collector import collect
from workspace_snapshot.config import FileRecord
from workspace_snapshot.exceptions import NoSnapshotError, NoWorkspaceRootError, WorkspaceSnapshotError
from workspace_snapshot.highlight import build_html
from workspace_snapshot.ignore_filter import build_ignore_filter
from workspace_snapshot.logging import logger
from workspace_snapshot.output_construction import build_markdown

if TYPE_CHECKING:
    from workspace_snapshot.collector import BinaryDetector
    from workspace_snapshot.settings import Settings

GENERATING_MESSAGE = "Generating markdown..."
ERROR_MESSAGE = "Error generating markdown. Please try again."
LOADING_MESSAGE = "Loading..."


class Snapshot(BaseModel):
    """Immutable result of one traversal.

    Both renderings are computed from the same `records` tuple, so the transcript and
    the preview always list the files in the same order.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    root: Path = Field(..., description="Traversal root")
    records: tuple[FileRecord, ...] = Field(default=(), description="Admitted files")

    def to_markdown(self) -> str:
        return build_markdown(self.records)

    def to_html(self) -> str:
        return build_html(self.records)

    @property
    def paths(self) -> list[str]:
        return [rec.rel for rec in self.records]


def take_snapshot(settings: Settings, *, is_binary: BinaryDetector | None = None) -> Snapshot:
    """Run the collection pipeline described by `settings`.

    Args:
        settings (Settings): root, ignore configuration, size and worker limits
        is_binary (BinaryDetector | None): optional replacement for the default sniffer

    Raises:
        NoWorkspaceRootError: if the root is not a directory
        EnumerationError: if the root cannot be listed

    Returns:
        Snapshot: the collected records
    """
    root = settings.root.resolve()
    ignore_filter = build_ignore_filter(root, settings.ignore_patterns, settings.ignore_files)
    kwargs = {} if is_binary is None else {"is_binary": is_binary}
    records = collect(
        root,
        ignore_filter,
        settings.max_file_size,
        max_workers=settings.max_workers,
        **kwargs,
    )
    logger.info("snapshot_collected", root=str(root), files=len(records), workers=settings.max_workers)
    return Snapshot(root=root, records=records)


class SnapshotSession:
    """Holds the last generated transcript and the preview content.

    `generate` refreshes both; `download` exports the transcript and requires a prior
    successful `generate`. Concurrent calls to `generate` are not serialized.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.snapshot: Snapshot | None = None
        self.markdown: str = ""
        self.preview: str = LOADING_MESSAGE

    def generate(self) -> Snapshot:
        """Collect the workspace and refresh the transcript and the preview.

        Raises:
            NoWorkspaceRootError: if the root is missing; nothing is modified
            EnumerationError: if the root cannot be listed; the preview shows an error
            WorkspaceSnapshotError: if the pipeline fails; the preview shows an error

        Returns:
            Snapshot: the new snapshot
        """
        if not self.settings.root.is_dir():
            raise NoWorkspaceRootError(folder=self.settings.root)
        self.preview = GENERATING_MESSAGE
        try:
            snapshot = take_snapshot(self.settings)
            markdown = snapshot.to_markdown()
            html = snapshot.to_html()
        except (WorkspaceSnapshotError, OSError) as e:
            logger.error("snapshot_failed", error=str(e))
            self.preview = ERROR_MESSAGE
            raise
        self.snapshot = snapshot
        self.markdown = markdown
        self.preview = html
        return snapshot

    def download(self, target: Path | None = None) -> Path:
        """Write the last transcript verbatim to `target`.

        Args:
            target (Path | None): destination, the configured output path when None

        Raises:
            NoSnapshotError: if nothing has been generated yet

        Returns:
            Path: the written file
        """
        if self.snapshot is None:
            raise NoSnapshotError
        out = target if target is not None else self.settings.output_path
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.markdown, encoding="utf-8", newline="")
        logger.info("markdown_saved", path=str(out))
        return out
