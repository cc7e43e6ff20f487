from __future__ import annotations

from typing import TYPE_CHECKING

from prrs.config import TOP_CHUNKS, Sentinel
from prrs.oracle import call_model
from prrs.prompts import summary_prompt

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prrs.models import RankedChunk
    from prrs.oracle import ModelOracle


def summarize_chunks(ranked: Sequence[RankedChunk], lens: str, oracle: ModelOracle) -> str:
    """Reduce the top-ranked chunks of a file to one summary with a single model call.

    The first ``TOP_CHUNKS`` entries are used in the order given by the ranker.

    Args:
        ranked (Sequence[RankedChunk]): the ranker output
        lens (str): the analysis lens
        oracle (ModelOracle): the model to ask

    Returns:
        str: the trimmed model reply, or a sentinel; never raises
    """
    top = list(ranked[:TOP_CHUNKS])
    if not top:
        return str(Sentinel.NO_CHUNKS)
    return call_model(oracle, summary_prompt(top, lens))
