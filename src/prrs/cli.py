"""prrs: Prompt-based Recursive Repo Summarizer.

Overview
--------
Summarizes a source tree with a language model, bottom-up: every source file
is chunked, its chunks are ranked and the best ones summarized; every folder
is summarized from the summaries of its children. One independent summary
tree is produced per analysis lens (architecture, security, data_flow, ...).

The model is reached through OpenRouter. The API key is read from
``OPENROUTER_API_KEY`` (a ``.env`` file in the working directory is loaded).

Usage
-----
Run `python -m prrs.cli --help` for full options. Common examples:
    - Architecture summary of the current folder:
        uv run prrs
    - Two lenses, JSON output, a faster model:
        uv run prrs --path src --lenses architecture,security --model g4f-no-reasoning --output json
    - Per-file summaries as a tree:
        uv run prrs --path src --output tree
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from prrs import __version__
from prrs.config import DEFAULT_MAX_CHUNKS, DEFAULT_MAX_DEPTH, DEFAULT_MODEL_KEY, MODEL_CATALOG
from prrs.exceptions import PrrsError
from prrs.logging import logger, setup_logging
from prrs.openrouter import OpenRouterContextLookup, OpenRouterOracle
from prrs.orchestrator import summarize_repository
from prrs.output_construction import render_console, render_json, render_tree
from prrs.settings import OutputFormat, Settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prrs.oracle import ModelOracle


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    p = argparse.ArgumentParser(
        prog="prrs",
        description="Prompt-based Recursive Repo Summarizer (multi-lens code analysis).",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-p", "--path", type=str, default=".", help="Target folder to analyze.")
    p.add_argument(
        "-l",
        "--lenses",
        type=str,
        default="architecture",
        help="Comma-separated lenses (e.g. architecture,data_flow,security).",
    )
    p.add_argument(
        "-m",
        "--model",
        type=str,
        choices=sorted(MODEL_CATALOG),
        default=DEFAULT_MODEL_KEY,
        help="Model key from the catalog.",
    )
    p.add_argument("-d", "--depth", type=int, default=DEFAULT_MAX_DEPTH, help="Max recursion depth.")
    p.add_argument(
        "-o",
        "--output",
        type=str,
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.CONSOLE.value,
        help="Output format.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    p.add_argument(
        "--max-chunks",
        type=int,
        default=DEFAULT_MAX_CHUNKS,
        help="Max chunks per file.",
    )
    p.add_argument(
        "--no-discover-context",
        dest="discover_context",
        action="store_false",
        help="Do not ask the provider for unknown context windows.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    args = p.parse_args(argv)
    return Settings(**vars(args))


def build_oracle(settings: Settings) -> OpenRouterOracle:
    return OpenRouterOracle(
        settings.model,
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
    )


def build_context_lookup(settings: Settings) -> OpenRouterContextLookup | None:
    if not settings.discover_context:
        return None
    return OpenRouterContextLookup(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
    )


def _describe(error: PrrsError) -> str:
    message = getattr(error, "message", "") or type(error).__name__
    for attr in ("path", "depth", "key"):
        if hasattr(error, attr):
            return f"{message} ({attr}={getattr(error, attr)})"
    return message


def main(argv: Sequence[str] | None = None, oracle: ModelOracle | None = None) -> int:
    """Run prrs from the command line.

    Args:
        argv (Sequence[str] | None): arguments, ``sys.argv[1:]`` when None
        oracle (ModelOracle | None): model to use instead of OpenRouter

    Returns:
        int: 0 on success, 1 on invalid input
    """
    try:
        settings = parse_args(argv)
    except ValidationError as e:
        print(f"Error: {e.errors()[0]['loc'][0]}: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1
    if settings.log_file or settings.verbose:
        setup_logging(settings.log_file or None, verbose=settings.verbose)

    path = Path(settings.path).resolve()
    logger.info(
        "Starting prrs on %s with lenses %s, model %s, depth %d",
        path,
        ",".join(settings.lenses),
        settings.model,
        settings.depth,
    )
    owned: list[OpenRouterOracle | OpenRouterContextLookup] = []
    try:
        context_lookup = None
        if oracle is None:
            oracle = build_oracle(settings)
            owned.append(oracle)
            context_lookup = build_context_lookup(settings)
            if context_lookup is not None:
                owned.append(context_lookup)
        summaries = summarize_repository(
            path,
            oracle,
            settings.lenses,
            model_key=settings.model,
            max_depth=settings.depth,
            max_chunks=settings.max_chunks,
            context_lookup=context_lookup,
        )
    except PrrsError as e:
        print(f"Error: {_describe(e)}", file=sys.stderr)
        return 1
    finally:
        for client in owned:
            client.close()

    if settings.output == OutputFormat.JSON:
        print(render_json(summaries))
    elif settings.output == OutputFormat.TREE:
        print(render_tree(summaries), end="")
    else:
        print(render_console(summaries, verbose=settings.verbose))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
