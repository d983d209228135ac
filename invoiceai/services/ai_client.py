"""HTTP client for the language model used by invoice generation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from invoiceai.config import settings
from invoiceai.exceptions import GenerationMalformedError, GenerationUpstreamError

logger = logging.getLogger(__name__)


class LanguageModelClient:
    """Thin async wrapper around an OpenAI-compatible chat completions API.

    Every failure is raised: transport errors, timeouts, non-2xx responses
    and a missing API key become ``GenerationUpstreamError``; a response
    without message content becomes ``GenerationMalformedError``. Nothing is
    retried.

    Parameters
    ----------
    api_key:
        Bearer key for the API. Defaults to ``OPENAI_API_KEY``.
    base_url:
        Root URL of the API (e.g. ``https://api.openai.com/v1``).
    model:
        Chat model name.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport, used by tests to stub the network.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_completion_tokens: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._model = model or settings.openai_model
        self._timeout = timeout if timeout is not None else settings.openai_timeout_seconds
        self._max_completion_tokens = max_completion_tokens or settings.openai_max_completion_tokens
        self._transport = transport

    async def complete_json(self, system_prompt: str, user_prompt: str) -> str:
        """Run one chat completion constrained to a JSON object and return the raw content."""
        if not self._api_key:
            raise GenerationUpstreamError("Language model is not configured. Set OPENAI_API_KEY.")

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {"type": "json_object"},
            "max_completion_tokens": self._max_completion_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            ) as client:
                response = await client.post("/chat/completions", json=payload, headers=headers)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Language model request timed out after %.1fs", self._timeout)
            raise GenerationUpstreamError("Language model request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Language model returned %d: %s",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise GenerationUpstreamError(
                f"Language model request failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Language model request failed: %s", str(exc))
            raise GenerationUpstreamError(f"Language model request failed: {exc}") from exc
        except ValueError as exc:
            raise GenerationMalformedError("Language model returned a non-JSON response envelope") from exc

        content = _extract_content(body)
        if not content:
            raise GenerationMalformedError("No response from language model")
        return content


def _extract_content(body: Any) -> str | None:
    try:
        return body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
