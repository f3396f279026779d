"""Token counting for generated prompts."""

from __future__ import annotations

import logging

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"


def estimate_tokens(text: str, encoding_name: str = DEFAULT_ENCODING) -> int:
    """Estimate the number of tokens `text` costs a model using `encoding_name`."""
    try:
        encoding = tiktoken.get_encoding(encoding_name)
    except Exception as exc:
        # Encodings are fetched on first use; offline machines may not have them.
        logger.warning("Failed to load tiktoken encoding %s (%s). Falling back to heuristic.", encoding_name, exc)
        return max(1, len(text) // 4)
    return len(encoding.encode(text, disallowed_special=()))
