from __future__ import annotations

import math
from typing import TYPE_CHECKING

from prrs.config import (
    CHARS_PER_TOKEN,
    CONTEXT_FRACTION,
    DEFAULT_CONTEXT_TOKENS,
    KNOWN_CONTEXT_WINDOWS,
    MIN_CHUNK_CHARS,
)
from prrs.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable

    ContextWindowLookup = Callable[[str], int]


def tokens_to_chunk_chars(tokens: int) -> int:
    """Convert a context window in tokens to a per-chunk character budget.

    About 4 characters per token, and 20% of the window per chunk.

    Returns:
        int: the budget, never below ``MIN_CHUNK_CHARS``
    """
    return max(MIN_CHUNK_CHARS, math.floor(tokens * CHARS_PER_TOKEN * CONTEXT_FRACTION))


def resolve_context_window(model_key: str, lookup: ContextWindowLookup | None = None) -> int:
    """Find the context window of a model, in tokens.

    The static table wins; otherwise ``lookup`` is asked. Any failure of the
    lookup, or a non-positive answer, falls back to ``DEFAULT_CONTEXT_TOKENS``.

    Args:
        model_key (str): the model catalog key
        lookup (ContextWindowLookup | None): optional discovery collaborator

    Returns:
        int: a positive token count
    """
    if model_key in KNOWN_CONTEXT_WINDOWS:
        return KNOWN_CONTEXT_WINDOWS[model_key]
    if lookup is None:
        return DEFAULT_CONTEXT_TOKENS
    try:
        tokens = int(lookup(model_key))
    except Exception as e:  # noqa: BLE001
        logger.warning("Context window lookup failed for %s, using default: %r", model_key, e)
        return DEFAULT_CONTEXT_TOKENS
    if tokens <= 0:
        logger.warning("Context window lookup returned %d for %s, using default", tokens, model_key)
        return DEFAULT_CONTEXT_TOKENS
    return tokens


def chunk_budget(model_key: str, lookup: ContextWindowLookup | None = None) -> int:
    """Determine ``max_chunk_chars`` for a whole run.

    Returns:
        int: a positive character count
    """
    tokens = resolve_context_window(model_key, lookup)
    budget = tokens_to_chunk_chars(tokens)
    logger.info("Chunk budget for %s: %d tokens -> %d chars", model_key, tokens, budget)
    return budget
