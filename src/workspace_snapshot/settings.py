from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from workspace_snapshot.collector import default_worker_count
from workspace_snapshot.config import DEFAULT_IGNORE_FILES, DEFAULT_MAX_FILE_SIZE, DEFAULT_OUTPUT_NAME
from workspace_snapshot.exceptions import ConfigError

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "WORKSPACE_SNAPSHOT_"


class Settings(BaseModel):
    """Configuration settings for the workspace_snapshot module."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    root: Path = Field(default_factory=Path.cwd, description="Traversal root.")
    output: Path | None = Field(
        default=None,
        description="Markdown export path (default: <root>/generated_markdown.md).",
    )
    html: Path | None = Field(default=None, description="Optional preview page path.")
    ignore_patterns: list[str] = Field(default_factory=list, description="Gitignore-syntax patterns.")
    ignore_files: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_FILES),
        description="Ignore-files looked up at the root.",
    )
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        ge=0,
        description="Files above this size in bytes are skipped.",
    )
    max_workers: int = Field(
        default_factory=default_worker_count,
        ge=1,
        description="Maximum number of files processed concurrently.",
    )
    log_file: str = Field(default="", description="Log file path.")

    @field_validator("ignore_patterns", "ignore_files", mode="before")
    @classmethod
    def _split_comma_list(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @property
    def output_path(self) -> Path:
        """Where the Markdown transcript is exported."""
        return self.output if self.output is not None else self.root / DEFAULT_OUTPUT_NAME


def _field_key(key: str) -> str:
    return key.strip().lower().replace("-", "_")


def load_env_overrides(env_file: str = ENV_FILE) -> dict[str, str]:
    """Collect `WORKSPACE_SNAPSHOT_*` values from the `.env` file and the environment.

    Process environment variables take precedence over the `.env` file.

    Args:
        env_file (str): path of the `.env` file, empty for none

    Returns:
        dict[str, str]: field name to raw value
    """
    values: dict[str, str | None] = dict(dotenv_values(env_file)) if env_file else {}
    values.update(os.environ)
    return {
        _field_key(k.removeprefix(ENV_PREFIX)): v
        for k, v in values.items()
        if k.startswith(ENV_PREFIX) and v is not None
    }


def load_config_file(path: Path) -> dict[str, Any]:
    """Load settings from a YAML mapping.

    Args:
        path (Path): the YAML file

    Raises:
        ConfigError: if the file cannot be read, is not a mapping, or has unknown keys

    Returns:
        dict[str, Any]: field name to value
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(detail=f"{path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(detail=f"{path}: expected a mapping at top level")
    out = {_field_key(str(k)): v for k, v in data.items()}
    unknown = sorted(set(out) - set(Settings.model_fields))
    if unknown:
        raise ConfigError(detail=f"{path}: unknown keys {unknown}")
    return out


def build_settings(
    cli_values: dict[str, Any],
    *,
    config_file: Path | None = None,
    env_file: str = ENV_FILE,
) -> Settings:
    """Merge defaults, environment, config file and command-line values.

    Later sources win: environment, then the YAML config file, then the command line.
    Command-line values that are None are treated as absent.

    Args:
        cli_values (dict[str, Any]): values parsed from the command line
        config_file (Path | None): optional YAML config file
        env_file (str): `.env` file to read, empty for none

    Raises:
        ConfigError: if a source is invalid or the merged values fail validation

    Returns:
        Settings: the validated settings
    """
    merged: dict[str, Any] = {}
    merged.update({k: v for k, v in load_env_overrides(env_file).items() if k in Settings.model_fields})
    if config_file is not None:
        merged.update(load_config_file(config_file))
    merged.update({k: v for k, v in cli_values.items() if v is not None})
    try:
        return Settings(**merged)
    except ValidationError as e:
        raise ConfigError(detail=str(e)) from e
