"""OpenAI chat-completions wrapper that only returns JSON objects."""

import json
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..core.logger import get_logger

logger = get_logger(__name__)

_JSON_MODE = {"type": "json_object"}


class LLMError(Exception):
    """Transport failure or a reply that is not a JSON object."""


class AnalysisLLM:
    """
    Thin async client for the generative-analysis endpoint.

    The SDK client is built on first use so a missing key surfaces as an
    ``LLMError`` from the run, not at import or startup.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 120.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @property
    def is_available(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise LLMError("OPENAI_API_KEY not configured")
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def complete_json(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float,
    ) -> Dict[str, Any]:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                response_format=_JSON_MODE,
            )
        except OpenAIError as e:
            raise LLMError(f"{type(e).__name__}: {e}") from e

        if not response.choices:
            raise LLMError("completion returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise LLMError("completion returned empty content")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LLMError(f"reply is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise LLMError(f"reply is a JSON {type(data).__name__}, expected object")

        usage = getattr(response, "usage", None)
        logger.debug(
            "llm_completion",
            model=model,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
        return data

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
