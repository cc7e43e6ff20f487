"""Chunk ranking with a tolerant parser for the model reply.

The model is asked for a JSON array of ``{index, score, reason}`` objects but
does not reliably return one. The reply goes through parse tiers in order:

1. the whole reply as strict JSON;
2. the first ``[...]`` substring found in the reply, with defaults for
   missing fields;
3. a default ranking of the first chunks, which cannot fail.

Chunk text is always looked up by clamped index in the input list, never
taken from the reply.
"""

from __future__ import annotations

import json
import math
import re
from typing import TYPE_CHECKING, Any

from prrs.config import DEFAULT_RANKED, DEFAULT_REASON, DEFAULT_SCORE, PLACEHOLDER_REASON
from prrs.exceptions import RankingParseError
from prrs.logging import logger
from prrs.models import RankedChunk
from prrs.oracle import call_model
from prrs.prompts import ranking_prompt

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from prrs.oracle import ModelOracle

    ParseTier = Callable[[str, Sequence[str]], list[RankedChunk]]

EMBEDDED_ARRAY = re.compile(r"\[[\s\S]*?\]")


def is_number(value: Any) -> bool:  # noqa: ANN401
    """Check for a finite JSON number (booleans excluded).

    Returns:
        bool: True if ``value`` can be used as an index or a score
    """
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def clamp_index(index: float, count: int) -> int:
    """Clamp a model-provided index into ``[0, count - 1]``.

    Returns:
        int: a valid position in a list of ``count`` chunks
    """
    return max(0, min(count - 1, int(index)))


def _resolve(item: dict[str, Any], chunks: Sequence[str]) -> RankedChunk:
    score = item.get("score")
    reason = item.get("reason")
    return RankedChunk(
        chunk=chunks[clamp_index(item["index"], len(chunks))],
        score=float(score) if is_number(score) else DEFAULT_SCORE,
        reason=str(reason) if reason else PLACEHOLDER_REASON,
    )


def parse_strict(reply: str, chunks: Sequence[str]) -> list[RankedChunk]:
    """Parse the whole reply as a JSON array of ranked entries.

    Args:
        reply (str): the raw model reply
        chunks (Sequence[str]): the chunks that were ranked

    Raises:
        RankingParseError: if the reply is not JSON, not a non-empty array, or
            any element lacks a numeric ``index`` or ``score``

    Returns:
        list[RankedChunk]: one entry per array element, in reply order
    """
    try:
        data = json.loads(reply.strip())
    except json.JSONDecodeError as e:
        raise RankingParseError(tier=1, reason=f"invalid JSON: {e.msg}") from e
    if not isinstance(data, list) or not data:
        raise RankingParseError(tier=1, reason="reply is not a non-empty JSON array")
    well_formed = all(
        isinstance(item, dict) and is_number(item.get("index")) and is_number(item.get("score")) for item in data
    )
    if not well_formed:
        raise RankingParseError(tier=1, reason="array elements need a numeric index and score")
    return [_resolve(item, chunks) for item in data]


def parse_embedded(reply: str, chunks: Sequence[str]) -> list[RankedChunk]:
    """Parse the first bracketed substring of the reply.

    Elements without a numeric ``index`` are dropped; ``score`` defaults to
    ``DEFAULT_SCORE`` and ``reason`` to a placeholder.

    Args:
        reply (str): the raw model reply
        chunks (Sequence[str]): the chunks that were ranked

    Raises:
        RankingParseError: if no bracketed JSON array with a usable element is found

    Returns:
        list[RankedChunk]: the usable entries, in reply order
    """
    match = EMBEDDED_ARRAY.search(reply)
    if match is None:
        raise RankingParseError(tier=2, reason="no bracketed array in reply")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise RankingParseError(tier=2, reason=f"invalid JSON: {e.msg}") from e
    if not isinstance(data, list):
        raise RankingParseError(tier=2, reason="bracketed value is not an array")
    items = [item for item in data if isinstance(item, dict) and is_number(item.get("index"))]
    if not items:
        raise RankingParseError(tier=2, reason="no element with a numeric index")
    return [_resolve(item, chunks) for item in items]


def default_ranking(chunks: Sequence[str]) -> list[RankedChunk]:
    """Rank the first chunks in source order with a neutral score.

    Returns:
        list[RankedChunk]: at most ``DEFAULT_RANKED`` entries
    """
    return [
        RankedChunk(chunk=chunk, score=DEFAULT_SCORE, reason=DEFAULT_REASON)
        for chunk in chunks[: min(DEFAULT_RANKED, len(chunks))]
    ]


PARSE_TIERS: tuple[ParseTier, ...] = (parse_strict, parse_embedded)


def parse_ranking(reply: str, chunks: Sequence[str]) -> list[RankedChunk]:
    """Turn a model reply into a ranked chunk list, degrading through the parse tiers.

    Entries parsed from the reply are stably sorted by descending score.
    Duplicate indices are kept as returned.

    Args:
        reply (str): the raw model reply
        chunks (Sequence[str]): the chunks that were ranked, non-empty

    Returns:
        list[RankedChunk]: never empty when ``chunks`` is not
    """
    for tier in PARSE_TIERS:
        try:
            ranked = tier(reply, chunks)
        except RankingParseError as e:
            logger.warning("Ranking parse tier %d failed: %s", e.tier, e.reason)
            continue
        return sorted(ranked, key=lambda r: r.score, reverse=True)
    logger.warning("Falling back to default ranking (parsing fully failed)")
    return default_ranking(chunks)


def rank_chunks(chunks: Sequence[str], lens: str, oracle: ModelOracle) -> list[RankedChunk]:
    """Ask the model to rank chunks by importance for ``lens``.

    Exactly one model call is made. A failed call yields the model error
    sentinel as reply, which ends in the default ranking.

    Args:
        chunks (Sequence[str]): the chunks of one file
        lens (str): the analysis lens
        oracle (ModelOracle): the model to ask

    Returns:
        list[RankedChunk]: the ranking, empty only when ``chunks`` is empty
    """
    if not chunks:
        return []
    reply = call_model(oracle, ranking_prompt(chunks, lens))
    return parse_ranking(reply, chunks)
