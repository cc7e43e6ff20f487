"""HTTP adapters for OpenRouter: chat completions and context-window discovery."""

from __future__ import annotations

from typing import Any

import httpx

from prrs.config import MODEL_CATALOG, OPENROUTER_BASE_URL
from prrs.exceptions import ContextWindowLookupError, MissingApiKeyError, ModelCallError, UnknownModelError
from prrs.logging import logger

DEFAULT_TIMEOUT = 120.0


def _headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def _require_key(api_key: str) -> str:
    if not api_key:
        raise MissingApiKeyError
    return api_key


class OpenRouterOracle:
    """Model oracle backed by the OpenRouter chat-completions endpoint.

    One ``generate`` call is one HTTP request; there is no retry. Failures are
    raised as ``ModelCallError`` and turned into a sentinel by the caller.
    """

    def __init__(
        self,
        model_key: str,
        api_key: str,
        *,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        if model_key not in MODEL_CATALOG:
            raise UnknownModelError(key=model_key)
        self.model = MODEL_CATALOG[model_key]
        self.api_key = _require_key(api_key)
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model.model_id,
            "messages": [{"role": "user", "content": prompt}],
            **self.model.request_options(),
        }

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the completion text.

        Args:
            prompt (str): the user message

        Raises:
            ModelCallError: on transport errors, non-2xx responses or an unexpected body

        Returns:
            str: the trimmed completion
        """
        try:
            response = self.client.post(
                f"{self.base_url}/chat/completions",
                json=self.payload(prompt),
                headers=_headers(self.api_key),
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ModelCallError(detail=e.response.text[:500], status_code=e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ModelCallError(detail=str(e)) from e

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ModelCallError(detail=f"unexpected completion body: {e!r}") from e
        if not isinstance(content, str):
            raise ModelCallError(detail="completion content is not text")
        return content.strip()

    def close(self) -> None:
        self.client.close()


def extract_endpoints(data: Any) -> list[dict[str, Any]] | None:  # noqa: ANN401
    """Find the endpoint list in a model-endpoints response.

    The API wraps it as ``{"data": {"endpoints": [...]}}`` but a top-level
    ``endpoints`` key is accepted too.

    Returns:
        list[dict[str, Any]] | None: the endpoints, or None if absent
    """
    if not isinstance(data, dict):
        return None
    wrapped = data.get("data")
    if isinstance(wrapped, dict) and isinstance(wrapped.get("endpoints"), list):
        return wrapped["endpoints"]
    if isinstance(data.get("endpoints"), list):
        return data["endpoints"]
    return None


class OpenRouterContextLookup:
    """Discover the usable context window of a catalog model.

    The answer is the smallest ``context_length`` among the providers the
    model is routed to, or among all endpoints when no order is configured.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = _require_key(api_key)
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def __call__(self, model_key: str) -> int:
        """Look up the context window of ``model_key``, in tokens.

        Raises:
            ContextWindowLookupError: when the model, the request or the response is unusable

        Returns:
            int: the smallest context length of the routed providers
        """
        model = MODEL_CATALOG.get(model_key)
        if model is None:
            raise ContextWindowLookupError(model_key=model_key, reason="unknown model key")
        try:
            response = self.client.get(
                f"{self.base_url}/models/{model.model_id}/endpoints",
                headers=_headers(self.api_key),
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ContextWindowLookupError(model_key=model_key, reason=str(e)) from e

        endpoints = extract_endpoints(data)
        if endpoints is None:
            raise ContextWindowLookupError(model_key=model_key, reason="no endpoints array in response")

        if model.provider_order:
            by_tag = {ep.get("tag"): ep for ep in endpoints if isinstance(ep, dict)}
            selected = []
            for provider in model.provider_order:
                if provider not in by_tag:
                    raise ContextWindowLookupError(model_key=model_key, reason=f"no endpoint for {provider}")
                selected.append(by_tag[provider])
        else:
            selected = [ep for ep in endpoints if isinstance(ep, dict)]

        lengths = [ep.get("context_length") for ep in selected]
        if not lengths or not all(isinstance(n, int) and not isinstance(n, bool) for n in lengths):
            raise ContextWindowLookupError(model_key=model_key, reason="missing numeric context_length")
        smallest = min(lengths)
        logger.debug("Discovered context window for %s: %d", model_key, smallest)
        return smallest

    def close(self) -> None:
        self.client.close()
