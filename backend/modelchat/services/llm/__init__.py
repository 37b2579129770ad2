# modelchat/services/llm/__init__.py
from .base import (
    CompletionProvider,
    LLMConfig,
    LLMResponse,
    ProviderConnectionError,
    ProviderError,
    ProviderGenerationError,
    ProviderTimeoutError,
    TokenUsage
)
from .factory import create_completion_provider
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    'CompletionProvider',
    'LLMConfig',
    'LLMResponse',
    'ProviderConnectionError',
    'ProviderError',
    'ProviderGenerationError',
    'ProviderTimeoutError',
    'TokenUsage',
    'create_completion_provider',
    'OpenAICompatibleProvider'
]
