from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorkspaceSnapshotError(Exception):
    """Base exception for errors in the workspace_snapshot module."""

    def __str__(self) -> str:
        return getattr(self, "message", "") or (self.__doc__ or "").strip()


@dataclass(frozen=True)
class ConfigError(WorkspaceSnapshotError):
    """Raised when configuration values cannot be loaded or validated."""

    detail: str

    @property
    def message(self) -> str:
        return f"Invalid configuration: {self.detail}"


@dataclass(frozen=True)
class NoWorkspaceRootError(WorkspaceSnapshotError):
    """Raised when the traversal root does not exist or is not a directory."""

    folder: Path
    message: str = "No workspace folder open"


@dataclass(frozen=True)
class EnumerationError(WorkspaceSnapshotError):
    """Raised when the traversal root cannot be listed at all."""

    folder: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Unable to enumerate {self.folder}: {self.reason}"


@dataclass(frozen=True)
class NoSnapshotError(WorkspaceSnapshotError):
    """Raised when an export is requested before any snapshot was generated."""

    message: str = "No markdown generated yet. Please generate markdown first."


@dataclass(frozen=True)
class DocumentExtractionError(WorkspaceSnapshotError):
    """Raised when a structured document cannot be parsed."""

    file: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Unable to extract text from DOCX file: {self.file}: {self.reason}"
