"""Depth-first summarization of a file-system tree.

Each call returns a ``SummaryNode`` it fully owns. Files go through the
chunk, rank and summarize stages in order; folders aggregate the summaries
of their retained children with one more model call. Children are processed
one at a time, in sorted listing order, so a traversal is deterministic given
a deterministic model.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from prrs.chunking import split_into_chunks
from prrs.config import DEFAULT_MAX_CHUNKS, NodeKind, Sentinel
from prrs.file_manipulation import is_source_file, list_entries, read_source_text
from prrs.logging import logger
from prrs.models import SummaryNode
from prrs.oracle import ModelOracle, call_model
from prrs.prompts import aggregation_prompt
from prrs.ranking import rank_chunks
from prrs.structure import StructuralSplitter, splitter_for
from prrs.summarizing import summarize_chunks


class TraversalContext(BaseModel):
    """Read-only configuration shared by every call of one lens traversal.

    Attributes:
        lens: The analysis lens.
        oracle: The model used for ranking, summaries and aggregation.
        max_depth: Entries deeper than this get the depth-limit sentinel.
        max_chunk_chars: Hard size cap of a chunk.
        max_chunks: Maximum number of chunks per file.
        splitter_factory: Picks the structural splitter for a file.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    lens: str
    oracle: ModelOracle
    max_depth: int = Field(..., ge=0)
    max_chunk_chars: int = Field(..., ge=1)
    max_chunks: int = Field(default=DEFAULT_MAX_CHUNKS, ge=1)
    splitter_factory: Callable[[Path], StructuralSplitter] = splitter_for


def summarize_file(path: Path, context: TraversalContext) -> SummaryNode:
    """Summarize one file: skip rules, then chunk, rank and summarize.

    Args:
        path (Path): the file to summarize
        context (TraversalContext): the run configuration

    Returns:
        SummaryNode: a file node carrying the summary or a sentinel
    """
    if not is_source_file(path):
        logger.info("Skipping non-code file: %s", path.name)
        return SummaryNode(summary=Sentinel.SKIPPED, path=path, kind=NodeKind.FILE)

    content = read_source_text(path)
    if content is None:
        return SummaryNode(summary=Sentinel.SKIPPED, path=path, kind=NodeKind.FILE)
    if not content.strip():
        return SummaryNode(summary=Sentinel.EMPTY_FILE, path=path, kind=NodeKind.FILE)

    logger.info("Processing file: %s", path.name)
    chunks = split_into_chunks(
        content,
        context.max_chunks,
        max_chunk_chars=context.max_chunk_chars,
        splitter=context.splitter_factory(path),
    )
    if not chunks:
        return SummaryNode(summary=Sentinel.NO_CHUNKS, path=path, kind=NodeKind.FILE)

    ranked = rank_chunks(chunks, context.lens, context.oracle)
    summary = summarize_chunks(ranked, context.lens, context.oracle)
    return SummaryNode(summary=summary, path=path, kind=NodeKind.FILE)


def summarize_folder(path: Path, context: TraversalContext, depth: int) -> SummaryNode:
    """Summarize a folder from the summaries of its children.

    Skipped children are dropped before aggregation and never reach the
    returned node.

    Args:
        path (Path): the folder to summarize
        context (TraversalContext): the run configuration
        depth (int): the depth of ``path``

    Returns:
        SummaryNode: a folder node with the retained children
    """
    logger.info("Processing folder: %s", path.name)
    children = [summarize_path(entry, context, depth + 1) for entry in list_entries(path)]
    kept = tuple(child for child in children if not child.is_skipped)
    if not kept:
        return SummaryNode(summary=Sentinel.EMPTY_FOLDER, path=path, kind=NodeKind.FOLDER)

    summary = call_model(context.oracle, aggregation_prompt(kept, context.lens))
    return SummaryNode(summary=summary, children=kept, path=path, kind=NodeKind.FOLDER)


def summarize_path(path: Path, context: TraversalContext, depth: int = 0) -> SummaryNode:
    """Summarize a file or folder for one lens.

    Args:
        path (Path): the entry to summarize
        context (TraversalContext): the run configuration
        depth (int): the depth of ``path``, 0 for the root

    Returns:
        SummaryNode: the summary tree rooted at ``path``
    """
    if depth > context.max_depth:
        return SummaryNode(summary=Sentinel.DEPTH_LIMIT, path=path)
    if path.is_dir():
        return summarize_folder(path, context, depth)
    return summarize_file(path, context)
