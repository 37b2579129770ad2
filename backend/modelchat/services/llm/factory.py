# modelchat/services/llm/factory.py
from ...core.config import Settings
from .base import CompletionProvider
from .openai_compatible import OpenAICompatibleProvider


def create_completion_provider(settings: Settings) -> CompletionProvider:
    """Create the provider configured for this process"""
    return OpenAICompatibleProvider(
        api_key=settings.COMPLETION_API_KEY,
        base_url=settings.COMPLETION_BASE_URL,
        timeout=settings.COMPLETION_TIMEOUT_SECONDS,
        max_retries=settings.COMPLETION_MAX_RETRIES
    )
