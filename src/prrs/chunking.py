from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

from prrs.config import BUCKET_SEPARATOR, DEFAULT_MAX_CHUNKS, MIN_BOUNDARY_OFFSET
from prrs.logging import logger

if TYPE_CHECKING:
    from prrs.structure import StructuralSplitter

DECLARATION_LINE = re.compile(
    r"^(?:def|class|function|const|let|var|import|export)\s+\w+|^\s*(?://|#)\s*(?:TODO|NOTE|FIXME)",
    re.IGNORECASE,
)

# Boundary tiers, most preferred first. Each entry is (pattern, offset of the cut
# inside the pattern): blank lines and line ends are cut after, comment lines before.
BOUNDARY_TIERS: tuple[tuple[tuple[str, int], ...], ...] = (
    (("\n\n", 2),),
    ((";\n", 2),),
    (("}\n", 2),),
    (("\n#", 1), ("\n//", 1)),
    (("\n", 1),),
)


def find_boundary(window: str) -> int | None:
    """Find the best place to cut ``window``, searching backward from its end.

    Tiers are tried in order of preference and the last occurrence inside the
    window wins within a tier. Cuts at or below ``MIN_BOUNDARY_OFFSET`` are too
    close to the start and rejected.

    Args:
        window (str): the prefix of the text that fits the size cap

    Returns:
        int | None: the cut offset, or None when no acceptable boundary exists
    """
    for tier in BOUNDARY_TIERS:
        best = -1
        for pattern, offset in tier:
            idx = window.rfind(pattern)
            if idx != -1:
                best = max(best, idx + offset)
        if best > MIN_BOUNDARY_OFFSET:
            return best
    return None


def split_by_size(text: str, max_chunk_chars: int) -> list[str]:
    """Split text into pieces of at most ``max_chunk_chars`` characters.

    Pieces are cut on the best boundary found by ``find_boundary``, or hard-cut
    at exactly ``max_chunk_chars`` when there is none. Concatenating the pieces
    gives back ``text``.

    Args:
        text (str): the text to split
        max_chunk_chars (int): the hard size cap

    Returns:
        list[str]: the pieces, in order, untrimmed
    """
    pieces: list[str] = []
    rest = text
    while len(rest) > max_chunk_chars:
        cut = find_boundary(rest[:max_chunk_chars]) or max_chunk_chars
        pieces.append(rest[:cut])
        rest = rest[cut:]
    if rest:
        pieces.append(rest)
    return pieces


def split_by_lines(text: str, max_chunk_chars: int) -> list[str]:
    """Chunk text with the declaration-line heuristic.

    A line that looks like a declaration or a TODO/NOTE/FIXME comment starts a
    new chunk. When the running chunk grows past the cap, every complete piece
    is emitted and the remainder keeps accumulating.

    Args:
        text (str): the file content
        max_chunk_chars (int): the hard size cap

    Returns:
        list[str]: the chunks, in order, untrimmed
    """
    chunks: list[str] = []
    current: list[str] = []
    size = 0
    for line in text.split("\n"):
        if current and DECLARATION_LINE.match(line):
            chunks.extend(split_by_size("\n".join(current), max_chunk_chars))
            current, size = [], 0
        size += len(line) + (1 if current else 0)
        current.append(line)
        if size > max_chunk_chars:
            pieces = split_by_size("\n".join(current), max_chunk_chars)
            chunks.extend(pieces[:-1])
            current, size = [pieces[-1]], len(pieces[-1])
    if current:
        chunks.extend(split_by_size("\n".join(current), max_chunk_chars))
    return chunks


def bucket_chunks(chunks: list[str], max_chunks: int, max_chunk_chars: int) -> list[str]:
    """Merge contiguous chunks so that at most ``max_chunks`` remain.

    Chunks are grouped ``ceil(len(chunks) / max_chunks)`` at a time and joined
    with a blank line. A merged bucket longer than the cap is hard-cut at the
    cap, so the size bound survives the merge.

    Args:
        chunks (list[str]): trimmed, non-empty chunks
        max_chunks (int): the maximum number of chunks to return
        max_chunk_chars (int): the hard size cap

    Returns:
        list[str]: the merged chunks
    """
    if len(chunks) <= max_chunks:
        return list(chunks)
    per_bucket = math.ceil(len(chunks) / max_chunks)
    merged: list[str] = []
    for start in range(0, len(chunks), per_bucket):
        bucket = BUCKET_SEPARATOR.join(chunks[start : start + per_bucket])
        if len(bucket) > max_chunk_chars:
            logger.warning("Truncating merged bucket of %d chars to %d", len(bucket), max_chunk_chars)
            bucket = bucket[:max_chunk_chars]
        merged.append(bucket.strip())
    return [chunk for chunk in merged if chunk]


def split_into_chunks(
    text: str,
    max_chunks: int = DEFAULT_MAX_CHUNKS,
    *,
    max_chunk_chars: int,
    splitter: StructuralSplitter | None = None,
) -> list[str]:
    """Split one file's text into an ordered list of bounded-size chunks.

    Top-level declarations from ``splitter`` are preferred; oversized ones are
    re-split on text boundaries. When the splitter is missing, unavailable or
    finds nothing, the declaration-line heuristic is used instead. The result
    is deterministic for a given input.

    Args:
        text (str): the file content
        max_chunks (int): the maximum number of chunks to return
        max_chunk_chars (int): the hard size cap of every chunk
        splitter (StructuralSplitter | None): syntax-aware declaration extractor

    Raises:
        ValueError: if ``max_chunks`` or ``max_chunk_chars`` is below 1

    Returns:
        list[str]: trimmed, non-empty chunks, each at most ``max_chunk_chars`` long
    """
    if max_chunks < 1 or max_chunk_chars < 1:
        msg = f"max_chunks and max_chunk_chars must be >= 1, got {max_chunks} and {max_chunk_chars}"
        raise ValueError(msg)

    declarations = splitter.split(text) if splitter is not None else None
    candidates: list[str] = []
    if declarations:
        for declaration in declarations:
            if len(declaration) > max_chunk_chars:
                candidates.extend(split_by_size(declaration, max_chunk_chars))
            else:
                candidates.append(declaration)
    else:
        candidates = split_by_lines(text, max_chunk_chars)

    chunks = [c.strip() for c in candidates if c.strip()]
    logger.debug("Split %d chars into %d chunks", len(text), len(chunks))
    return bucket_chunks(chunks, max_chunks, max_chunk_chars)
