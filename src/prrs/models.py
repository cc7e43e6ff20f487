from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from prrs.config import NodeKind, Sentinel


class SummaryNode(BaseModel):
    """Summary of one file or folder, with the retained child summaries.

    Attributes:
        summary: Model output, or a ``Sentinel`` value on skip/empty/failure.
        children: Retained children, in listing order. Always empty for files.
        path: Location in the source tree.
        kind: File or folder; None for the synthetic depth-limit node.
    """

    model_config = ConfigDict(frozen=True)

    summary: str
    children: tuple[SummaryNode, ...] = ()
    path: Path | None = None
    kind: NodeKind | None = None

    @property
    def name(self) -> str:
        """Basename of the node path, or an empty string for pathless nodes."""
        return self.path.name if self.path is not None else ""

    @property
    def is_skipped(self) -> bool:
        """Whether the node was skipped and must not reach its parent."""
        return self.summary.startswith(Sentinel.SKIPPED)


class RankedChunk(BaseModel):
    """A chunk of source text with the score and reason given by the model."""

    model_config = ConfigDict(frozen=True)

    chunk: str
    score: float = Field(..., description="Importance, nominally 1-10 (not enforced).")
    reason: str = ""


PerLensResult = dict[str, SummaryNode]
