"""
Entry point for the prompt-gen command-line interface (exposed as `prompt-gen`).

Run it from (or point it at) a project directory.  On the first run for a
directory it asks a few questions and stores the answers in
`~/.prompt-gen.toml`; on every run it asks for the goal of the session,
collects the project's files, strips their comments and writes a prompt
file named `{project_name}_{YYMMDD}.txt` to the configured output path.
The goal is then added to the project's history.

Usage examples::

    # Generate a prompt for the current directory
    prompt-gen

    # Same, without the interactive goal question
    prompt-gen ~/src/widget --goal "add a --verbose flag"

    # Print the goals of previous runs
    prompt-gen --show-history

    # (during development)
    python -m promptgen.cli .

The generated file follows this section order:
1) Intro prompt, 2) File tree, 3) File contents, 4) Specific goal.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from .assembler import build_prompt, write_prompt
from .config import ConfigProvider, ConfigStore, ConsoleProvider
from .errors import FileSystemError, PromptGenError
from .tokens import estimate_tokens
from .tree_walker import collect_files


def main(argv: Optional[List[str]] = None, provider: Optional[ConfigProvider] = None, today: Optional[date] = None) -> int:
    """Primary CLI entry point.

    Parses arguments, loads or creates the project configuration, builds
    the prompt and writes it to disk.  Returns an exit code.
    """
    parser = argparse.ArgumentParser(description="Generate an LLM prompt from a project's source tree.")
    parser.add_argument(
        "root",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Project directory (default: the current directory).",
    )
    parser.add_argument(
        "--goal",
        type=str,
        default=None,
        help="Goal or feature for this run.  If omitted, it is asked for interactively.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file to use instead of ~/.prompt-gen.toml (or $PROMPT_GEN_CONFIG).",
    )
    parser.add_argument(
        "--count-tokens",
        action="store_true",
        help="Report the token count of the generated prompt (uses tiktoken).",
    )
    parser.add_argument(
        "--show-history",
        action="store_true",
        help="Print the goals of previous runs for this project and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.environ.get("PROMPT_GEN_LOGLEVEL", "INFO").upper(),
        help="Logging verbosity (default from env PROMPT_GEN_LOGLEVEL or INFO).",
    )
    args = parser.parse_args(argv)

    level = getattr(logging, (args.log_level or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(asctime)s %(name)s:%(lineno)d - %(message)s",
    )
    logging.getLogger().setLevel(level)
    logger = logging.getLogger("promptgen.cli")

    root = args.root.resolve()
    if not root.is_dir():
        logger.error("The specified root directory %s does not exist or is not a directory.", root)
        return 1

    provider = provider or ConsoleProvider()
    skipped: List[FileSystemError] = []

    def record_skip(error: FileSystemError) -> None:
        logger.warning("Skipping unreadable path: %s", error)
        skipped.append(error)

    try:
        store = ConfigStore(args.config).load()

        if args.show_history:
            for i, goal in enumerate(store.history(root), start=1):
                print(f"{i}. {goal}")
            return 0

        config = store.load_or_create(root, provider)

        goal = args.goal
        if goal is None:
            print("Enter a specific goal or feature for the project:")
            goal = provider.ask("Goal")
        goal = goal.strip()
        if not goal:
            logger.warning("Empty goal; the prompt will end with an empty goal section.")

        logger.info(
            "Execution context: root=%s | config=%s | output=%s",
            root,
            store.path,
            config.output_path,
        )

        entries = collect_files(root, config.allowed_extensions, config.deny_dirs, on_error=record_skip)
        prompt = build_prompt(config, entries, goal, root_name=str(root))
        output_dir = Path(config.output_path).expanduser()
        if not output_dir.is_absolute():
            output_dir = root / output_dir
        written = write_prompt(prompt, output_dir, config.project_name, today or date.today())
        store.append_history(root, goal)
    except PromptGenError as exc:
        logger.error("%s", exc)
        return 1
    except (EOFError, KeyboardInterrupt):
        logger.error("Input aborted; nothing was written.")
        return 1

    if skipped:
        logger.warning("%d path(s) could not be read and were skipped.", len(skipped))
    if args.count_tokens:
        logger.info("Prompt size: %d characters, ~%d tokens", len(prompt.text), estimate_tokens(prompt.text))
    print(f"Prompt file generated: {written}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
