"""
Exception types raised by the prompt-gen package.

Library code raises these; `promptgen.cli` catches them at the top level
and turns them into a logged message and a non-zero exit code.  Each error
keeps the offending path and the underlying cause so the message shown to
the user has enough context to act on.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class PromptGenError(Exception):
    """Base class for all prompt-gen errors."""

    def __init__(self, message: str, path: Optional[PathLike] = None, cause: Optional[BaseException] = None) -> None:
        self.path = Path(path) if path is not None else None
        self.cause = cause
        detail = message
        if self.path is not None:
            detail = f"{detail} ({self.path})"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class ConfigReadError(PromptGenError):
    """The configuration file exists but cannot be read or parsed."""


class ConfigWriteError(PromptGenError):
    """The configuration file cannot be written."""


class FileSystemError(PromptGenError):
    """A directory or file under the project root could not be read.

    Non-fatal: the walker reports it and skips the affected subtree.
    """


class WriteError(PromptGenError):
    """The generated prompt could not be written to its output file."""
