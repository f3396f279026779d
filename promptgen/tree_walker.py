"""
Project traversal for prompt-gen.

`collect_files` walks a project directory and returns the files whose
extension is allowed, skipping any directory whose name is denied (and its
whole subtree).  Each directory is listed in lexicographic order of entry
names, so repeated runs over an unchanged tree produce identical output.

Symbolic links to directories are not followed, which keeps the walk
finite when a link points back up the tree.  Symbolic links to regular
files are read like ordinary files.

Unreadable directories and files are not fatal: a `FileSystemError` is
handed to the `on_error` callback (by default it is logged as a warning)
and the walk carries on with the next entry.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .errors import FileSystemError

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[FileSystemError], None]


@dataclass
class FileEntry:
    """A file selected for the prompt."""
    relative_path: str
    extension: str
    raw_contents: bytes


def normalize_extensions(extensions: Iterable[str]) -> List[str]:
    """Strip dots and blanks, drop empties and duplicates, keep order."""
    seen: List[str] = []
    for ext in extensions:
        ext = ext.strip().lstrip(".")
        if ext and ext not in seen:
            seen.append(ext)
    return seen


def _log_error(error: FileSystemError) -> None:
    logger.warning("Skipping unreadable path: %s", error)


def collect_files(
    root: Path,
    allowed_extensions: Iterable[str],
    deny_dirs: Iterable[str],
    on_error: Optional[ErrorHandler] = None,
) -> List[FileEntry]:
    """Return the allowed files under `root` in deterministic walk order."""
    root = Path(root)
    allowed = set(normalize_extensions(allowed_extensions))
    denied = {d.strip() for d in deny_dirs if d.strip()}
    report = on_error or _log_error
    entries: List[FileEntry] = []

    def traverse(current: Path, rel_dir: str) -> None:
        try:
            names = sorted(os.listdir(current))
        except OSError as exc:
            report(FileSystemError("Cannot list directory", current, exc))
            return

        for name in names:
            path = current / name
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            try:
                is_dir = path.is_dir()
                is_link = is_dir and path.is_symlink()
                is_file = not is_dir and path.is_file()
            except OSError as exc:
                report(FileSystemError("Cannot inspect path", path, exc))
                continue
            if is_dir:
                if name in denied:
                    logger.debug("Denied directory %s", rel_path)
                    continue
                if is_link:
                    logger.debug("Not following directory symlink %s", rel_path)
                    continue
                traverse(path, rel_path)
                continue
            ext = path.suffix.lstrip(".")
            if not ext or ext not in allowed or not is_file:
                continue
            try:
                raw = path.read_bytes()
            except OSError as exc:
                report(FileSystemError("Cannot read file", path, exc))
                continue
            entries.append(FileEntry(rel_path, ext, raw))

    traverse(root, "")
    logger.info("Collected %d file(s) under %s", len(entries), root)
    return entries


def render_tree(root_name: str, entries: Iterable[FileEntry]) -> str:
    """Render the entries as a directory tree.

    Only directories that contain at least one entry are shown.  Children
    of a directory appear in the same order as the walk produced them, so
    the tree lines up with the file sections that follow it.
    """
    children: Dict[str, List[str]] = {"": []}

    for entry in entries:
        parts = entry.relative_path.split("/")
        parent = ""
        for part in parts:
            node = f"{parent}/{part}" if parent else part
            siblings = children.setdefault(parent, [])
            if node not in siblings:
                siblings.append(node)
            parent = node

    lines: List[str] = [root_name]

    def render_dir(current: str, prefix: str) -> None:
        nodes = children.get(current, [])
        for i, node in enumerate(nodes):
            last = i == len(nodes) - 1
            name = node.rsplit("/", 1)[-1]
            is_dir = node in children
            lines.append(f"{prefix}{'└── ' if last else '├── '}{name}{'/' if is_dir else ''}")
            if is_dir:
                render_dir(node, prefix + ("    " if last else "│   "))

    render_dir("", "")
    return "\n".join(lines)
