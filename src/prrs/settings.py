from __future__ import annotations

import os
from enum import StrEnum, auto
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from prrs.config import (
    API_KEY_VARIABLE,
    DEFAULT_LENSES,
    DEFAULT_MAX_CHUNKS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MODEL_KEY,
    OPENROUTER_BASE_URL,
)

ENV_FILE = find_dotenv(usecwd=True)
if ENV_FILE:
    load_dotenv(ENV_FILE, override=False)


class OutputFormat(StrEnum):
    """How the per-lens result is written to stdout."""

    CONSOLE = auto()
    JSON = auto()
    TREE = auto()


class Settings(BaseModel):
    """Configuration settings for one prrs run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: Path = Field(default_factory=Path.cwd, description="Folder or file to summarize.")
    lenses: list[str] = Field(default_factory=lambda: list(DEFAULT_LENSES), description="Analysis lenses.")
    model: str = Field(default=DEFAULT_MODEL_KEY, description="Model catalog key.")
    depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, description="Max recursion depth.")
    output: OutputFormat = Field(default=OutputFormat.CONSOLE, description="Output format.")
    verbose: bool = Field(default=False, description="Verbose logging and output.")
    log_file: str = Field(default="", description="Log file path.")

    max_chunks: int = Field(default=DEFAULT_MAX_CHUNKS, ge=1, description="Max chunks per file.")
    discover_context: bool = Field(
        default=True,
        description="Ask the provider for unknown context windows.",
    )

    api_key: str = Field(
        default_factory=lambda: os.getenv(API_KEY_VARIABLE, ""),
        description="OpenRouter API key.",
    )
    base_url: str = Field(default=OPENROUTER_BASE_URL, description="OpenAI-compatible API base URL.")
    timeout: float = Field(default=120.0, gt=0, description="HTTP timeout in seconds.")

    @field_validator("lenses", mode="before")
    @classmethod
    def _split_lenses(cls, value: str | list[str]) -> list[str]:
        items = value.split(",") if isinstance(value, str) else list(value)
        return [item.strip() for item in items if item and item.strip()]
