"""Async chat-completion client for OpenAI-compatible providers.

The same client class serves the language-model provider (OpenRouter)
and the web-research provider (Perplexity); both expose the OpenAI chat
completions API under a different base URL.
"""

import logging
from typing import Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from . import config
from .results import ProviderResult

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin wrapper: (system instruction, user content) -> completion text."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        name: str = "LLM",
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.name = name
        self.default_headers = default_headers or {}
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                default_headers=self.default_headers,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ) -> ProviderResult[str]:
        """Run one completion. Never raises; failures become a status.

        Single attempt: callers are user-facing and latency-sensitive.
        """
        if not self.configured:
            logger.warning(f"[{self.name}] No API key configured")
            return ProviderResult.unconfigured("", f"{self.name} API key not set")

        try:
            response = await self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"[{self.name}] API error: {e}")
            return ProviderResult.failed("", str(e))
        except Exception as e:
            logger.error(f"[{self.name}] Unexpected error: {e}")
            return ProviderResult.failed("", str(e))

        try:
            content = response.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            logger.warning(f"[{self.name}] Malformed response: {e}")
            return ProviderResult.unparsable("", str(e))

        content = content.strip()
        if not content:
            return ProviderResult.empty("", "empty completion")
        return ProviderResult.success(content)


def get_llm_client(api_key: Optional[str] = None) -> LLMClient:
    """Language-model provider client (OpenRouter)."""
    return LLMClient(
        api_key=api_key if api_key is not None else config.OPENROUTER_API_KEY,
        base_url=config.OPENROUTER_BASE_URL,
        model=config.OPENROUTER_MODEL,
        name="OpenRouter",
        default_headers=config.OPENROUTER_HEADERS,
    )


def get_research_client(api_key: Optional[str] = None) -> LLMClient:
    """Web-research provider client (Perplexity)."""
    return LLMClient(
        api_key=api_key if api_key is not None else config.PERPLEXITY_API_KEY,
        base_url=config.PERPLEXITY_BASE_URL,
        model=config.PERPLEXITY_MODEL,
        name="Perplexity",
    )
