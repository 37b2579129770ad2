# modelchat/dependencies.py
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import Settings
from .db.session import get_db
from .services.chat import ChatService
from .services.llm.base import CompletionProvider
from .services.storage import ChatStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_completion_provider(request: Request) -> CompletionProvider:
    return request.app.state.completion_provider


async def get_storage(db: AsyncSession = Depends(get_db)) -> ChatStorage:
    return ChatStorage(db)


async def get_chat_service(
        storage: ChatStorage = Depends(get_storage),
        provider: CompletionProvider = Depends(get_completion_provider),
        settings: Settings = Depends(get_settings)
) -> ChatService:
    return ChatService(storage, provider, settings)
