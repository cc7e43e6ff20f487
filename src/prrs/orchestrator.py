from __future__ import annotations

from typing import TYPE_CHECKING

from prrs.config import DEFAULT_LENSES, DEFAULT_MAX_CHUNKS, DEFAULT_MAX_DEPTH, DEFAULT_MODEL_KEY, MODEL_CATALOG
from prrs.context import chunk_budget
from prrs.exceptions import InvalidDepthError, InvalidLensesError, InvalidPathError, UnknownModelError
from prrs.logging import logger
from prrs.traversal import TraversalContext, summarize_path

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from prrs.context import ContextWindowLookup
    from prrs.models import PerLensResult
    from prrs.oracle import ModelOracle


def normalize_lenses(lenses: Sequence[str]) -> list[str]:
    """Strip lens names and drop empty and repeated ones, keeping request order.

    Args:
        lenses (Sequence[str]): the requested lenses

    Raises:
        InvalidLensesError: if no lens is left

    Returns:
        list[str]: unique lens names, in request order
    """
    out: list[str] = []
    for lens in lenses:
        name = lens.strip()
        if name and name not in out:
            out.append(name)
    if not out:
        raise InvalidLensesError
    return out


def validate_run(path: Path, model_key: str, max_depth: int) -> None:
    """Reject invalid top-level configuration before any traversal starts.

    Args:
        path (Path): the root to summarize
        model_key (str): the model catalog key
        max_depth (int): the maximum recursion depth

    Raises:
        InvalidPathError: if ``path`` does not exist
        InvalidDepthError: if ``max_depth`` is not positive
        UnknownModelError: if ``model_key`` is not in the catalog
    """
    if not path.exists():
        raise InvalidPathError(path=path)
    if max_depth < 1:
        raise InvalidDepthError(depth=max_depth)
    if model_key not in MODEL_CATALOG:
        raise UnknownModelError(key=model_key)


def summarize_repository(
    path: Path,
    oracle: ModelOracle,
    lenses: Sequence[str] = DEFAULT_LENSES,
    *,
    model_key: str = DEFAULT_MODEL_KEY,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_chunks: int = DEFAULT_MAX_CHUNKS,
    context_lookup: ContextWindowLookup | None = None,
) -> PerLensResult:
    """Summarize a source tree once per lens.

    The chunk budget is resolved once for the run. Each lens then gets its own
    traversal from ``path`` at depth 0; lenses share nothing but the read-only
    configuration.

    Args:
        path (Path): the root folder or file
        oracle (ModelOracle): the model, already configured for ``model_key``
        lenses (Sequence[str]): the lenses, in output order
        model_key (str): the model catalog key, used to size chunks
        max_depth (int): the maximum recursion depth, at least 1
        max_chunks (int): the maximum number of chunks per file
        context_lookup (ContextWindowLookup | None): optional context-window discovery

    Returns:
        PerLensResult: one summary tree per lens, in request order
    """
    lens_names = normalize_lenses(lenses)
    validate_run(path, model_key, max_depth)
    max_chunk_chars = chunk_budget(model_key, context_lookup)

    summaries: PerLensResult = {}
    for lens in lens_names:
        logger.info("Processing lens %s with model %s", lens, model_key)
        context = TraversalContext(
            lens=lens,
            oracle=oracle,
            max_depth=max_depth,
            max_chunk_chars=max_chunk_chars,
            max_chunks=max_chunks,
        )
        summaries[lens] = summarize_path(path, context, depth=0)
    return summaries
