from __future__ import annotations

from typing import Protocol, runtime_checkable

from prrs.config import Sentinel
from prrs.logging import logger


@runtime_checkable
class ModelOracle(Protocol):
    """Text-generation collaborator. ``generate`` raises on failure."""

    def generate(self, prompt: str) -> str: ...


def call_model(oracle: ModelOracle, prompt: str) -> str:
    """Issue one model call and never let it fail.

    Any exception raised by the oracle (network errors and timeouts included)
    is logged and replaced by the ``Sentinel.MODEL_ERROR`` summary so that the
    traversal keeps going.

    Args:
        oracle (ModelOracle): the model to ask
        prompt (str): the full prompt

    Returns:
        str: the trimmed model reply, or the model error sentinel
    """
    try:
        reply = oracle.generate(prompt)
    except Exception as e:  # noqa: BLE001
        logger.warning("Model call failed: %r", e)
        return str(Sentinel.MODEL_ERROR)
    return (reply or "").strip()
