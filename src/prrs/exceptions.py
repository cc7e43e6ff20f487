from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PrrsError(Exception):
    """Base exception for errors in the prrs package."""


@dataclass(frozen=True)
class InvalidPathError(PrrsError):
    """Raised when the path to summarize does not exist."""

    path: Path
    message: str = "The specified path does not exist."


@dataclass(frozen=True)
class InvalidDepthError(PrrsError):
    """Raised when the maximum recursion depth is not a positive integer."""

    depth: int
    message: str = "The maximum depth must be a positive integer."


@dataclass(frozen=True)
class InvalidLensesError(PrrsError):
    """Raised when no usable lens name was requested."""

    message: str = "At least one non-empty lens is required."


@dataclass(frozen=True)
class UnknownModelError(PrrsError):
    """Raised when a model key is not part of the model catalog."""

    key: str
    message: str = "The specified model key is not in the model catalog."


@dataclass(frozen=True)
class MissingApiKeyError(PrrsError):
    """Raised when an HTTP adapter is built without an API key."""

    variable: str = "OPENROUTER_API_KEY"
    message: str = "No API key configured. Export it or put it in a .env file."


@dataclass(frozen=True)
class ModelCallError(PrrsError):
    """Raised when the model oracle cannot produce a completion."""

    detail: str
    status_code: int | None = None


@dataclass(frozen=True)
class ContextWindowLookupError(PrrsError):
    """Raised when the context window of a model cannot be discovered."""

    model_key: str
    reason: str


@dataclass(frozen=True)
class RankingParseError(PrrsError):
    """Raised by a ranking parse tier when the model reply does not fit its shape."""

    tier: int
    reason: str
