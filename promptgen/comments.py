"""
Comment removal for the files included in a generated prompt.

The stripper is a single-pass lexical scanner, not a parser.  Each file
extension maps to a `CommentSyntax` describing its line comment markers,
block comment delimiters and string delimiters.  String literals are
copied through untouched so that text such as ``"http://example.com"``
survives; everything the scanner recognises as a comment is dropped.

Known limitations of the lexical approach: regex literals, raw strings
with custom delimiters (``r#"..."#``), heredocs and similar constructs are
not understood and may be mis-scanned.  Unknown extensions are returned
unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentSyntax:
    """Lexical comment rules for one family of languages.

    Attributes
    ----------
    line: Tuple[str, ...]
        Markers that start a comment running to the end of the line.
    block: Tuple[Tuple[str, str], ...]
        (open, close) delimiter pairs of block comments.
    strings: Tuple[str, ...]
        String delimiters.  Three-character delimiters and the backtick
        always span lines; the others only when `multiline_strings` is set.
    nested: bool
        Block comments nest (Rust, Haskell, Swift, Kotlin).
    multiline_strings: bool
        Ordinary string literals may contain raw newlines (Rust).
    char_literals: bool
        ``'`` only opens a literal when it forms a complete char literal
        such as ``'a'`` or ``'\\n'``; otherwise it is a lifetime or label.
    word_start_line: bool
        Line markers only count at the start of a word (shell ``#``).
    """

    line: Tuple[str, ...] = ()
    block: Tuple[Tuple[str, str], ...] = ()
    strings: Tuple[str, ...] = ()
    nested: bool = False
    multiline_strings: bool = False
    char_literals: bool = False
    word_start_line: bool = False


C_LIKE = CommentSyntax(line=("//",), block=(("/*", "*/"),), strings=('"', "'"))
JS_LIKE = CommentSyntax(line=("//",), block=(("/*", "*/"),), strings=('"', "'", "`"))
GO = CommentSyntax(line=("//",), block=(("/*", "*/"),), strings=('"', "'", "`"))
RUST = CommentSyntax(
    line=("//",),
    block=(("/*", "*/"),),
    strings=('"',),
    nested=True,
    multiline_strings=True,
    char_literals=True,
)
JVM_MODERN = CommentSyntax(line=("//",), block=(("/*", "*/"),), strings=('"""', '"', "'"), nested=True)
CSS = CommentSyntax(block=(("/*", "*/"),), strings=('"', "'"))
SCSS = CommentSyntax(line=("//",), block=(("/*", "*/"),), strings=('"', "'"))
PYTHON = CommentSyntax(line=("#",), strings=('"""', "'''", '"', "'"))
HASH = CommentSyntax(line=("#",), strings=('"', "'"))
TOML = CommentSyntax(line=("#",), strings=('"""', "'''", '"', "'"))
SHELL = CommentSyntax(line=("#",), strings=('"', "'"), word_start_line=True)
SQL = CommentSyntax(line=("--",), block=(("/*", "*/"),), strings=("'", '"'))
LUA = CommentSyntax(line=("--",), block=(("--[[", "]]"),), strings=('"', "'"))
HASKELL = CommentSyntax(line=("--",), block=(("{-", "-}"),), strings=('"',), nested=True)
MARKUP = CommentSyntax(block=(("<!--", "-->"),))

SYNTAX_BY_EXTENSION: Dict[str, CommentSyntax] = {
    "rs": RUST,
    "c": C_LIKE,
    "h": C_LIKE,
    "cpp": C_LIKE,
    "cc": C_LIKE,
    "cxx": C_LIKE,
    "hpp": C_LIKE,
    "java": C_LIKE,
    "cs": C_LIKE,
    "dart": C_LIKE,
    "js": JS_LIKE,
    "jsx": JS_LIKE,
    "mjs": JS_LIKE,
    "ts": JS_LIKE,
    "tsx": JS_LIKE,
    "go": GO,
    "kt": JVM_MODERN,
    "kts": JVM_MODERN,
    "swift": JVM_MODERN,
    "scala": JVM_MODERN,
    "css": CSS,
    "scss": SCSS,
    "less": SCSS,
    "py": PYTHON,
    "pyi": PYTHON,
    "rb": HASH,
    "pl": HASH,
    "r": HASH,
    "yml": HASH,
    "yaml": HASH,
    "toml": TOML,
    "sh": SHELL,
    "bash": SHELL,
    "zsh": SHELL,
    "sql": SQL,
    "lua": LUA,
    "hs": HASKELL,
    "html": MARKUP,
    "htm": MARKUP,
    "xml": MARKUP,
    "svg": MARKUP,
    "vue": MARKUP,
}

_CHAR_LITERAL = re.compile(r"'(?:\\(?:x[0-9A-Fa-f]{2}|u\{[0-9A-Fa-f]{1,6}\}|.)|[^'\\\n])'")
_WORD_BREAKS = " \t\r\n;|&()"


def syntax_for(extension: str) -> Optional[CommentSyntax]:
    """Return the comment syntax for `extension` (with or without the dot)."""
    return SYNTAX_BY_EXTENSION.get(extension.lower().lstrip("."))


def strip_comments(contents: str, extension: str) -> str:
    """Remove line and block comments from `contents`.

    Text inside string literals is preserved.  A line comment takes the
    whitespace in front of it with it; a block comment sitting between two
    non-space characters is replaced by a single space so that the
    surrounding tokens are not glued together.  An unterminated block
    comment is left as it is.  Never raises: if scanning fails the input
    is returned unchanged.
    """
    syntax = syntax_for(extension)
    if syntax is None:
        return contents
    try:
        return _scan(contents, syntax)
    except Exception as exc:  # pragma: no cover - scanner is total over str
        logger.warning("Comment stripping failed for .%s content (%s); keeping it unchanged.", extension, exc)
        return contents


def remove_empty_lines(text: str) -> str:
    """Drop blank and whitespace-only lines."""
    return "\n".join(line for line in text.splitlines() if line.strip())


def _scan(text: str, syntax: CommentSyntax) -> str:
    strings = _longest_first(syntax.strings)
    lines = _longest_first(syntax.line)
    blocks = sorted(syntax.block, key=lambda pair: len(pair[0]), reverse=True)
    out: List[str] = []
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]

        if syntax.char_literals and ch == "'":
            match = _CHAR_LITERAL.match(text, i)
            end = match.end() if match else i + 1
            out.append(text[i:end])
            i = end
            continue

        delim = _match_at(text, i, strings)
        if delim:
            multiline = syntax.multiline_strings or len(delim) == 3 or delim == "`"
            end = _string_end(text, i + len(delim), delim, multiline)
            out.append(text[i:end])
            i = end
            continue

        pair = next((p for p in blocks if text.startswith(p[0], i)), None)
        if pair:
            end = _block_end(text, i, pair, syntax.nested)
            if end < 0:
                out.append(text[i:])
                break
            if end < n and not text[end].isspace() and _last_char(out) not in ("", " ", "\t", "\n", "\r"):
                out.append(" ")
            i = end
            continue

        marker = _match_at(text, i, lines)
        if marker and (not syntax.word_start_line or i == 0 or text[i - 1] in _WORD_BREAKS):
            _trim_trailing_blanks(out)
            newline = text.find("\n", i)
            i = n if newline < 0 else newline
            continue

        out.append(ch)
        i += 1
    return "".join(out)


def _longest_first(markers: Sequence[str]) -> Tuple[str, ...]:
    return tuple(sorted(markers, key=len, reverse=True))


def _match_at(text: str, i: int, markers: Sequence[str]) -> Optional[str]:
    for marker in markers:
        if text.startswith(marker, i):
            return marker
    return None


def _string_end(text: str, start: int, delim: str, multiline: bool) -> int:
    """Index just past the closing `delim`; an unclosed single-line string ends at the newline."""
    n = len(text)
    j = start
    while j < n:
        if text[j] == "\\":
            j += 2
            continue
        if text.startswith(delim, j):
            return j + len(delim)
        if text[j] == "\n" and not multiline:
            return j
        j += 1
    return n


def _block_end(text: str, start: int, pair: Tuple[str, str], nested: bool) -> int:
    """Index just past the comment closing at depth zero, or -1 if it never closes."""
    opener, closer = pair
    depth = 1
    j = start + len(opener)
    while j < len(text):
        if text.startswith(closer, j):
            depth -= 1
            j += len(closer)
            if depth == 0:
                return j
            continue
        if nested and text.startswith(opener, j):
            depth += 1
            j += len(opener)
            continue
        j += 1
    return -1


def _last_char(out: List[str]) -> str:
    return out[-1][-1] if out and out[-1] else ""


def _trim_trailing_blanks(out: List[str]) -> None:
    while out:
        trimmed = out[-1].rstrip(" \t")
        if trimmed:
            out[-1] = trimmed
            return
        out.pop()
