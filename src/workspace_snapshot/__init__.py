"""Compile a directory tree into one Markdown transcript and a highlighted preview."""

__version__ = "0.1.0"
