from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

RANKING_MARKER = "rank these code chunks"
SUMMARY_MARKER = "Summarize these top-ranked code chunks"
AGGREGATION_MARKER = "Summarize these child code summaries"


def default_reply(prompt: str) -> str:
    """Answer like a well-behaved model, based on which prompt was sent."""
    if RANKING_MARKER in prompt:
        return json.dumps([{"index": 0, "score": 8, "reason": "entry point"}])
    if SUMMARY_MARKER in prompt:
        return "  file summary  "
    if AGGREGATION_MARKER in prompt:
        return "folder summary"
    return "unexpected prompt"


class FakeOracle:
    """Scripted model oracle recording every prompt it receives.

    Queued replies are consumed first; an exception instance in the queue is
    raised instead of returned. Once the queue is empty, ``respond`` answers.
    """

    def __init__(
        self,
        replies: list[str | Exception] | None = None,
        respond: Callable[[str], str] = default_reply,
    ) -> None:
        self.replies = list(replies or [])
        self.respond = respond
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return self.respond(prompt)

    def prompts_with(self, marker: str) -> list[str]:
        return [p for p in self.prompts if marker in p]


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()
