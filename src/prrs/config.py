from __future__ import annotations

from enum import StrEnum, auto
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(StrEnum):
    """Kind of file-system entry a summary node stands for."""

    FILE = auto()
    FOLDER = auto()


class Sentinel(StrEnum):
    """Fixed in-band summaries used instead of exceptions.

    The traversal compares summaries against these strings, so their text must
    stay stable. Skipped children are recognized with ``startswith``.
    """

    DEPTH_LIMIT = "Depth limit reached"
    SKIPPED = "Skipped (non-source file)"
    EMPTY_FILE = "Empty file"
    NO_CHUNKS = "No chunks extracted"
    EMPTY_FOLDER = "Empty folder (ignored items only)"
    MODEL_ERROR = "Error in summarization"


SOURCE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".cjs",
        ".js",
        ".json",
        ".jsx",
        ".mjs",
        ".py",
        ".ts",
        ".tsx",
    },
)

SKIPPED_DIRECTORIES: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "__pycache__",
        "build",
        "dist",
        "node_modules",
        "venv",
    },
)

DEFAULT_LENSES: tuple[str, ...] = ("architecture",)
DEFAULT_MAX_DEPTH = 3
DEFAULT_MAX_CHUNKS = 10

# Chunker
MIN_BOUNDARY_OFFSET = 10
BUCKET_SEPARATOR = "\n\n"

# Ranker / Summarizer
PREVIEW_CHARS = 200
DEFAULT_SCORE = 5.0
DEFAULT_RANKED = 10
PLACEHOLDER_REASON = "Extracted ranking"
DEFAULT_REASON = "Default ranking (parse failed)"
TOP_CHUNKS = 5
CHILD_SUMMARY_CHARS = 100

# Tree output
TREE_SUMMARY_CHARS = 150

# Context sizer
CHARS_PER_TOKEN = 4
CONTEXT_FRACTION = 0.20
MIN_CHUNK_CHARS = 1000
DEFAULT_CONTEXT_TOKENS = 32_768

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
API_KEY_VARIABLE = "OPENROUTER_API_KEY"


class ModelConfig(BaseModel):
    """Per-call options of one catalog entry.

    Attributes:
        key: Catalog key used on the command line (e.g. ``g4f-reasoning``).
        model_id: Provider-side model identifier.
        temperature: Sampling temperature.
        max_tokens: Completion token cap.
        reasoning: Reasoning options forwarded verbatim.
        provider_order: Provider tags, in routing preference order.
        allow_fallbacks: Whether the router may use providers outside the order.
        data_collection: Provider data-collection policy.
        sort: Provider sort criterion.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    model_id: str
    temperature: float = 0.0
    max_tokens: int = Field(default=500, gt=0)
    reasoning: dict[str, Any] = Field(default_factory=dict)
    provider_order: tuple[str, ...] = ()
    allow_fallbacks: bool = False
    data_collection: str = "deny"
    sort: str = "price"

    def request_options(self) -> dict[str, Any]:
        """Build the request body options shared by every completion call.

        Returns:
            dict[str, Any]: the JSON fields to merge into a chat-completions payload
        """
        options: dict[str, Any] = {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": False,
        }
        if self.reasoning:
            options["reasoning"] = dict(self.reasoning)
        if self.provider_order:
            options["provider"] = {
                "order": list(self.provider_order),
                "allow_fallbacks": self.allow_fallbacks,
                "data_collection": self.data_collection,
                "sort": self.sort,
            }
        return options


_GROK_PROVIDERS = ("xai",)
_GPT_OSS_PROVIDERS = ("novita/bf16", "gmicloud/bf16")

MODEL_CATALOG: dict[str, ModelConfig] = {
    "g4f-reasoning": ModelConfig(
        key="g4f-reasoning",
        model_id="x-ai/grok-4-fast",
        reasoning={"enabled": True},
        provider_order=_GROK_PROVIDERS,
    ),
    "g4f-no-reasoning": ModelConfig(
        key="g4f-no-reasoning",
        model_id="x-ai/grok-4-fast",
        reasoning={"enabled": False},
        provider_order=_GROK_PROVIDERS,
    ),
    "gpt120-reasoning": ModelConfig(
        key="gpt120-reasoning",
        model_id="openai/gpt-oss-120b",
        reasoning={"effort": "high"},
        provider_order=_GPT_OSS_PROVIDERS,
    ),
    "gpt120-no-reasoning": ModelConfig(
        key="gpt120-no-reasoning",
        model_id="openai/gpt-oss-120b",
        reasoning={"enabled": False},
        provider_order=_GPT_OSS_PROVIDERS,
    ),
}

DEFAULT_MODEL_KEY = "g4f-reasoning"

# Token windows known without asking the provider. Grok entries are discovered.
KNOWN_CONTEXT_WINDOWS: dict[str, int] = {
    "gpt120-reasoning": 131_072,
    "gpt120-no-reasoning": 131_072,
}
