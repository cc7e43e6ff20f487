"""Prompt builders. Every prompt is parameterized by the lens."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prrs.config import CHILD_SUMMARY_CHARS, PREVIEW_CHARS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prrs.models import RankedChunk, SummaryNode


def chunk_preview(chunk: str, limit: int = PREVIEW_CHARS) -> str:
    """Collapse a chunk to a single line and truncate it to ``limit`` characters.

    Args:
        chunk (str): the chunk text
        limit (int): the preview length

    Returns:
        str: the one-line preview
    """
    flat = " ".join(chunk.split())
    if len(flat) > limit:
        return flat[:limit] + "…"
    return flat


def ranking_prompt(chunks: Sequence[str], lens: str) -> str:
    """Ask the model to rank chunks by importance, by index only.

    Args:
        chunks (Sequence[str]): the chunks of one file, listed as one-line previews
        lens (str): the analysis lens

    Returns:
        str: the ranking prompt
    """
    previews = "\n".join(f"[{i}] {chunk_preview(chunk)}" for i, chunk in enumerate(chunks))
    return (
        f'As a code analyst, rank these code chunks by importance from the "{lens}" perspective. '
        "Each chunk is identified by its index in brackets. "
        'Respond with ONLY a valid JSON array, NO other text: [{"index": number, '
        '"score": number (1-10), "reason": "brief reason on system impact"}]. '
        "Reference chunks by index only, do not copy their text. "
        "Do not add markdown or prefixes.\n\n"
        f"Chunks:\n{previews}"
    )


def format_ranked_chunk(ranked: RankedChunk) -> str:
    """Render a ranked chunk as ``score: reason`` followed by its text."""
    return f"{ranked.score:g}: {ranked.reason}\n{ranked.chunk}"


def summary_prompt(top_chunks: Sequence[RankedChunk], lens: str) -> str:
    """Ask for a short summary of the best chunks of one file.

    Args:
        top_chunks (Sequence[RankedChunk]): the chunks to summarize, in ranker order
        lens (str): the analysis lens

    Returns:
        str: the summary prompt
    """
    body = "\n\n".join(format_ranked_chunk(r) for r in top_chunks)
    return (
        f'Summarize these top-ranked code chunks from the "{lens}" perspective: '
        "key patterns, dependencies, potential issues/impacts. Concise (100-200 words).\n\n"
        f"Top chunks with scores/reasons:\n{body}"
    )


def child_summary_line(child: SummaryNode, limit: int = CHILD_SUMMARY_CHARS) -> str:
    return f"{child.name}: {child.summary[:limit]}..."


def aggregation_prompt(children: Sequence[SummaryNode], lens: str) -> str:
    """Ask for a folder summary built from the truncated summaries of its children.

    Args:
        children (Sequence[SummaryNode]): the retained children, in listing order
        lens (str): the analysis lens

    Returns:
        str: the aggregation prompt
    """
    lines = "\n".join(child_summary_line(child) for child in children)
    return (
        f'Summarize these child code summaries from the "{lens}" perspective: '
        "overall structure, key interactions/dependencies, high-level insights. Concise.\n\n"
        f"Child summaries:\n{lines}"
    )
