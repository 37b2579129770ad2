# modelchat/services/llm/openai_compatible.py
import logging
from typing import Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, OpenAIError

from .base import (
    CompletionProvider,
    LLMConfig,
    LLMResponse,
    ProviderConnectionError,
    ProviderGenerationError,
    ProviderTimeoutError,
    TokenUsage
)

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(CompletionProvider):
    """Chat completions against any OpenAI compatible endpoint."""

    def __init__(
            self,
            api_key: str,
            base_url: str = "https://api.openai.com/v1",
            timeout: float = 30.0,
            max_retries: int = 0,
            http_client: Optional[httpx.AsyncClient] = None
    ):
        if not api_key:
            raise ProviderConnectionError("Completion API key not provided")

        self.base_url = base_url
        self.timeout = timeout
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            max_retries=max_retries,
            http_client=http_client
        )

    async def complete(self, messages: list[dict[str, str]], config: LLMConfig) -> LLMResponse:
        try:
            completion = await self._client.chat.completions.create(
                model=config.model,
                messages=messages,
                temperature=config.temperature,
                max_tokens=config.max_tokens
            )
        except APITimeoutError as e:
            raise ProviderTimeoutError(f"No response from {self.base_url} within {self.timeout}s") from e
        except APIStatusError as e:
            raise ProviderConnectionError(f"Provider returned {e.status_code}: {e.message}") from e
        except APIConnectionError as e:
            raise ProviderConnectionError(f"Failed to reach provider: {str(e)}") from e
        except OpenAIError as e:
            raise ProviderGenerationError(f"Failed to generate response: {str(e)}") from e
        except Exception as e:
            raise ProviderGenerationError(f"Unreadable provider response: {str(e)}") from e

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderGenerationError("Malformed completion payload") from e

        if not content:
            raise ProviderGenerationError("No response from AI")

        usage = None
        if completion.usage:
            usage = TokenUsage(
                prompt_tokens=completion.usage.prompt_tokens,
                completion_tokens=completion.usage.completion_tokens,
                total_tokens=completion.usage.total_tokens
            )
        logger.debug(f"Completion from {config.model}: {len(content)} chars")

        return LLMResponse(content=content, model=completion.model or config.model, usage=usage)

    async def close(self) -> None:
        await self._client.close()
