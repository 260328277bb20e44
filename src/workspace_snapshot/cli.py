"""
workspace_snapshot: compile a directory tree into one Markdown document.

Overview
--------
Every file under the root that is not ignored is written to the transcript as a
level-3 heading followed by its content in a fenced block. The fence is always
longer than any backtick run inside the file, so the transcript stays valid
Markdown whatever the files contain.

- gitignore-style filtering from `--ignore-pattern` and the root's ignore-files,
- binary files are skipped, `.docx` documents are converted to text,
- files larger than `--max-file-size` bytes are skipped,
- an optional syntax-highlighted HTML preview is written with `--html`.

Usage
-----
Run `python -m workspace_snapshot.cli --help` for full options. Common examples:
    - Transcript of the current directory:
        uv run python -m workspace_snapshot.cli --output snapshot.md

    - Extra patterns, a preview page and a log file:
        uv run python -m workspace_snapshot.cli --ignore-pattern "*.lock" --html preview.html --log-file snapshot.log
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from workspace_snapshot import __version__
from workspace_snapshot.exceptions import ConfigError, WorkspaceSnapshotError
from workspace_snapshot.file_manipulation import relpath
from workspace_snapshot.highlight import render_preview_page
from workspace_snapshot.ignore_filter import escape_pattern
from workspace_snapshot.logging import setup_logging
from workspace_snapshot.settings import Settings, build_settings
from workspace_snapshot.snapshot import SnapshotSession

if TYPE_CHECKING:
    from collections.abc import Sequence


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into validated settings.

    Flags that are not given fall back to the `--config` file, then to the
    `WORKSPACE_SNAPSHOT_*` environment, then to the defaults.

    Args:
        argv (Sequence[str] | None): arguments, `sys.argv[1:]` when None

    Raises:
        ConfigError: if the merged configuration is invalid

    Returns:
        Settings: the settings to run with
    """
    p = argparse.ArgumentParser(
        description="Compile a directory tree into a single Markdown transcript.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--root", type=Path, default=None, help="Directory to snapshot.")
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Markdown output file (default: <root>/generated_markdown.md).",
    )
    p.add_argument("--html", type=Path, default=None, help="Also write an HTML preview page.")
    p.add_argument(
        "--ignore-pattern",
        dest="ignore_patterns",
        action="append",
        default=None,
        help="Gitignore-syntax pattern (repeatable).",
    )
    p.add_argument(
        "--ignore-file",
        dest="ignore_files",
        action="append",
        default=None,
        help="Ignore-file name at the root (repeatable, default: .gitignore).",
    )
    p.add_argument(
        "--max-file-size",
        type=int,
        default=None,
        help="Skip files larger than this many bytes (default: 512000).",
    )
    p.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum number of files processed concurrently.",
    )
    p.add_argument("--config", type=Path, default=None, help="YAML settings file.")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    args = vars(p.parse_args(argv))
    config_file = args.pop("config")
    return build_settings(args, config_file=config_file)


def exclude_own_outputs(settings: Settings) -> Settings:
    """Add the output and preview files to the ignore patterns when they sit under the root.

    Args:
        settings (Settings): the parsed settings

    Returns:
        Settings: settings whose snapshot never contains its own outputs
    """
    root = settings.root.resolve()
    extra: list[str] = []
    for target in (settings.output_path, settings.html):
        if target is None:
            continue
        resolved = target.resolve()
        if resolved.is_relative_to(root):
            extra.append("/" + escape_pattern(relpath(resolved, root)))
    if not extra:
        return settings
    return settings.model_copy(update={"ignore_patterns": [*settings.ignore_patterns, *extra]})


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except ConfigError as e:
        sys.stderr.write(f"{e}\n")
        return 2
    if settings.log_file:
        setup_logging(settings.log_file)

    session = SnapshotSession(exclude_own_outputs(settings))
    try:
        snapshot = session.generate()
        if settings.html is not None:
            settings.html.parent.mkdir(parents=True, exist_ok=True)
            settings.html.write_text(render_preview_page(session.preview), encoding="utf-8")
        out_path = session.download(settings.output_path)
    except (WorkspaceSnapshotError, OSError) as e:
        sys.stderr.write(f"Error generating markdown: {e}\n")
        return 1

    print(f"Wrote {out_path} files={len(snapshot.records)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
