"""
prompt-gen package.

This package provides a command-line interface (CLI) for assembling a
text prompt for a language model from a local source tree.  The
resulting prompt includes:

* The project's intro prompt, stored per project in `~/.prompt-gen.toml`.
* A tree of the files selected by allowed extensions and denied directories.
* The contents of those files with comments stripped.
* The user-supplied goal for the run, which is also kept in the history.

See `cli.py` for the entry point.
"""

__all__ = [
    "cli",
]

__version__ = "0.1.0"
