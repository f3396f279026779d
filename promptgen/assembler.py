"""
Prompt assembly and output for prompt-gen.

A generated prompt always has the same four sections, in this order:

1) the project's intro prompt,
2) a tree of the included files,
3) every included file, each as a ``File: <path>`` header followed by a
   fenced block holding its contents with comments and blank lines removed,
4) the goal, as ``Specific Goal: <goal>``.

Downstream consumers rely on this order; keep it stable.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import date as Date
from pathlib import Path
from typing import List, Optional, Sequence

from .comments import remove_empty_lines, strip_comments
from .config import ProjectConfig
from .errors import WriteError
from .tree_walker import FileEntry, render_tree

logger = logging.getLogger(__name__)

BINARY_PLACEHOLDER = "(binary file, contents omitted)"

FENCE_LANGUAGES = {
    "py": "python",
    "pyi": "python",
    "ts": "ts",
    "tsx": "tsx",
    "js": "js",
    "jsx": "jsx",
    "mjs": "js",
    "json": "json",
    "md": "md",
    "yml": "yaml",
    "yaml": "yaml",
    "toml": "toml",
    "sh": "sh",
    "bash": "bash",
    "zsh": "zsh",
    "ps1": "powershell",
    "ini": "ini",
    "cfg": "ini",
    "xml": "xml",
    "svg": "xml",
    "html": "html",
    "htm": "html",
    "vue": "vue",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "java": "java",
    "kt": "kotlin",
    "kts": "kotlin",
    "scala": "scala",
    "go": "go",
    "rs": "rust",
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "cs": "csharp",
    "dart": "dart",
    "swift": "swift",
    "rb": "ruby",
    "pl": "perl",
    "r": "r",
    "lua": "lua",
    "hs": "haskell",
    "sql": "sql",
    "proto": "proto",
}


@dataclass
class GeneratedPrompt:
    """The assembled prompt text and the files it contains."""
    text: str
    files: List[str] = field(default_factory=list)


def is_binary(raw: bytes) -> bool:
    """Treat content with a NUL byte in its first KiB as binary."""
    return b"\0" in raw[:1024]


def fence_language(extension: str) -> str:
    return FENCE_LANGUAGES.get(extension.lower(), "")


def render_file(entry: FileEntry) -> str:
    """Header plus fenced, comment-stripped contents of one file."""
    if is_binary(entry.raw_contents):
        body = BINARY_PLACEHOLDER
    else:
        text = entry.raw_contents.decode("utf-8", errors="replace")
        body = remove_empty_lines(strip_comments(text, entry.extension))
    return f"File: {entry.relative_path}\n```{fence_language(entry.extension)}\n{body}\n```"


def build_prompt(
    config: ProjectConfig,
    file_entries: Sequence[FileEntry],
    goal: str,
    root_name: Optional[str] = None,
) -> GeneratedPrompt:
    """Assemble intro, tree, file contents and goal into one document."""
    parts: List[str] = [config.intro_prompt.strip()]
    parts.append(render_tree(root_name or config.project_name, file_entries))
    for entry in file_entries:
        parts.append(render_file(entry))
    parts.append(f"Specific Goal: {goal}")
    return GeneratedPrompt(
        text="\n\n".join(parts) + "\n",
        files=[entry.relative_path for entry in file_entries],
    )


def output_file_path(output_path: Path, project_name: str, date: Date) -> Path:
    """`output_path/{project_name}_{YYMMDD}.txt`."""
    safe_name = project_name.replace("/", "_").replace(os.sep, "_")
    return Path(output_path) / f"{safe_name}_{date.strftime('%y%m%d')}.txt"


def write_prompt(prompt: GeneratedPrompt, output_path: Path, project_name: str, date: Date) -> Path:
    """Write the prompt, replacing any file generated earlier the same day.

    The text goes to a temporary file next to the target which is then
    renamed over it, so a failed run never leaves a truncated prompt behind.
    """
    target = output_file_path(output_path, project_name, date)
    tmp_name: Optional[str] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(prompt.text)
        os.replace(tmp_name, target)
        tmp_name = None
    except (OSError, UnicodeError) as exc:
        raise WriteError("Failed to write prompt file", target, exc) from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    logger.info("Prompt written to %s (%d file(s))", target, len(prompt.files))
    return target
