from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

from prrs.config import TREE_SUMMARY_CHARS

if TYPE_CHECKING:
    from prrs.models import PerLensResult, SummaryNode


def tree_depth(node: SummaryNode) -> int:
    """Count the levels of a summary tree, the root included.

    Args:
        node (SummaryNode): the root of the tree

    Returns:
        int: 1 for a leaf, 1 + the deepest child otherwise
    """
    if not node.children:
        return 1
    return 1 + max(tree_depth(child) for child in node.children)


def render_json(summaries: PerLensResult) -> str:
    """Serialize the per-lens result, lens order preserved.

    Args:
        summaries (PerLensResult): the orchestrator output

    Returns:
        str: an indented JSON document keyed by lens
    """
    payload = {lens: node.model_dump(mode="json") for lens, node in summaries.items()}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_console(summaries: PerLensResult, *, verbose: bool = False) -> str:
    """Render each lens heading followed by its root summary.

    Args:
        summaries (PerLensResult): the orchestrator output
        verbose (bool): also print the depth of each tree

    Returns:
        str: the console text
    """
    out = io.StringIO()
    for lens, node in summaries.items():
        out.write(f"\n=== {lens.upper()} Summary ===\n")
        out.write(f"{node.summary}\n")
        if verbose:
            out.write(f"Tree depth: {tree_depth(node)} levels\n")
    return out.getvalue()


def _write_node(out: io.StringIO, node: SummaryNode, prefix: str, *, is_last: bool) -> None:
    if node.is_skipped:
        return
    connector, branch = ("└── ", "    ") if is_last else ("├── ", "│   ")
    kind = node.kind.value if node.kind is not None else "unknown"
    out.write(f"{prefix}{connector}{node.name or 'root'} ({kind})\n")
    out.write(f"{prefix}    Summary: {node.summary[:TREE_SUMMARY_CHARS]}...\n")

    children = [child for child in node.children if not child.is_skipped]
    for i, child in enumerate(children):
        _write_node(out, child, prefix + branch, is_last=i == len(children) - 1)


def render_tree(summaries: PerLensResult) -> str:
    """Draw every lens tree with box-drawing connectors.

    Each node shows its basename, its kind and the start of its summary.
    Skipped nodes are hidden and lenses are separated by a blank line.

    Args:
        summaries (PerLensResult): the orchestrator output

    Returns:
        str: the tree text
    """
    out = io.StringIO()
    for index, (lens, node) in enumerate(summaries.items()):
        if index:
            out.write("\n")
        out.write(f"{lens.upper()} Analysis:\n")
        _write_node(out, node, "", is_last=True)
    return out.getvalue()
