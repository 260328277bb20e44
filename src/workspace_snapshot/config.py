from __future__ import annotations

from enum import StrEnum, auto
from functools import wraps
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from workspace_snapshot.file_manipulation import normalize_path

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    FileProcessorFn = Callable[[Path], str]

DEFAULT_IGNORE_FILES = [".gitignore"]
DEFAULT_MAX_FILE_SIZE = 512_000
DEFAULT_OUTPUT_NAME = "generated_markdown.md"


class ContentSource(StrEnum):
    """Where the content of a file record came from.

    TEXT content was decoded from the file itself. DOCUMENT content was produced by a
    registered extractor for a structured binary format and is not source code.
    """

    TEXT = auto()
    DOCUMENT = auto()


FILE_PROCESSOR: dict[str, Callable[[Path], str]] = {}


class FileRecord(BaseModel):
    """One admitted file of a snapshot.

    Attributes:
        rel: Path relative to the traversal root, posix separators, unique per snapshot.
        content: Fully materialized text content.
        source: Whether `content` was read as text or extracted from a document.
        extension: Lower-cased suffix of `rel` without the leading dot (may be empty).
    """

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., min_length=1, description="File path relative to the traversal root")
    content: str = Field(..., description="Text content of the file")
    source: ContentSource = Field(default=ContentSource.TEXT, description="Content origin")

    @field_validator("rel")
    @classmethod
    def _normalize_rel(cls, value: str) -> str:
        return normalize_path(value)

    @computed_field
    @property
    def extension(self) -> str:
        """Lower-cased extension used as fence info-string and language hint."""
        return PurePosixPath(self.rel).suffix.lower().removeprefix(".")

    @property
    def is_document(self) -> bool:
        """Whether the content came from a structured document extractor."""
        return self.source is ContentSource.DOCUMENT


def register_file_processor(
    key: str | list[str],
) -> Callable[[FileProcessorFn], FileProcessorFn]:
    """Decorator to register a content extractor for a file suffix.

    Files whose lower-cased suffix has a registered extractor bypass binary sniffing:
    the extractor turns them into text, and the record is flagged as a document.

    Args:
        key (str | list[str]): The file suffix (e.g. ".docx"), or a list of suffixes,
            that the decorated function should handle.

    Returns:
        Callable[[FileProcessorFn], FileProcessorFn]: A decorator that registers the given function
        in the FILE_PROCESSOR mapping under the specified key(s) and returns the original function.
    """

    def decorator(func: FileProcessorFn) -> FileProcessorFn:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            return func(*args, **kwargs)

        keys = key if isinstance(key, list) else [key]
        for k in keys:
            FILE_PROCESSOR[k.lower()] = wrapper
        return wrapper

    return decorator


def file_processor_for(path: Path) -> Callable[[Path], str] | None:
    """Return the registered extractor for `path`, if any."""
    return FILE_PROCESSOR.get(path.suffix.lower())
