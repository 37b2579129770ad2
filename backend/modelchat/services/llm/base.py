# modelchat/services/llm/base.py
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field


class ProviderError(Exception):
    """Base exception for completion provider failures."""
    pass


class ProviderConnectionError(ProviderError):
    """Raised when the provider cannot be reached or rejects the request."""
    pass


class ProviderGenerationError(ProviderError):
    """Raised when the provider answers without usable content."""
    pass


class ProviderTimeoutError(ProviderError):
    """Raised when the provider does not answer in time."""
    pass


class LLMConfig(BaseModel):
    model: str
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(500, gt=0)


class TokenUsage(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class LLMResponse(BaseModel):
    content: str
    model: str
    usage: Optional[TokenUsage] = None


class CompletionProvider(ABC):
    """Base interface for hosted chat completion APIs."""

    @abstractmethod
    async def complete(self, messages: list[dict[str, str]], config: LLMConfig) -> LLMResponse:
        """Return the reply to `messages`. Raises ProviderError on any failure."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
