# modelchat/services/chat.py
import asyncio
import logging
from typing import Any, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from .llm.base import CompletionProvider, LLMConfig
from .resolver import resolve_chat
from .storage import ChatStorage
from ..core.config import Settings
from ..db.models import ChatModel, MessageModel
from ..schemas.chat import MessageRole

logger = logging.getLogger(__name__)


def build_prompt(
        system_prompt: str,
        content: str,
        history: Optional[list[MessageModel]] = None
) -> list[dict[str, str]]:
    messages = [{"role": "system", "content": system_prompt}]
    for message in history or []:
        if message.content.strip():
            messages.append({"role": message.role, "content": message.content})
    messages.append({"role": "user", "content": content})
    return messages


class ChatService:
    def __init__(self, storage: ChatStorage, provider: CompletionProvider, settings: Settings):
        self.storage = storage
        self.provider = provider
        self.settings = settings

    async def list_chats(self) -> list[ChatModel]:
        return await self.storage.list_chats()

    async def get_chat(self, identifier: Union[int, str]) -> ChatModel:
        return await resolve_chat(self.storage, identifier)

    async def list_messages(self, identifier: Union[int, str]) -> list[MessageModel]:
        chat = await resolve_chat(self.storage, identifier)
        return await self.storage.list_messages(chat.id)

    async def create_chat(self, title: str, model: str) -> ChatModel:
        return await self.storage.create_chat(title, model)

    async def update_chat(self, chat_id: int, fields: dict[str, Any]) -> ChatModel:
        return await self.storage.update_chat(chat_id, fields)

    async def delete_chat(self, chat_id: int) -> None:
        if not await self.storage.delete_chat(chat_id):
            logger.debug(f"Delete of unknown chat {chat_id} ignored")

    async def send(
            self,
            chat_identifier: Union[int, str],
            content: str,
            username: str
    ) -> list[MessageModel]:
        """Store a user message and, if the provider answers, the assistant reply.

        Only resolution and the user message write can fail the request. Anything
        going wrong after the user message is stored degrades to `[user]`.
        """
        chat = await resolve_chat(self.storage, chat_identifier)

        user_message = await self.storage.insert_message(
            chat_id=chat.id,
            role=MessageRole.USER,
            content=content,
            username=username,
            model=chat.model
        )

        try:
            history = await self._history(chat.id, user_message.id)
            # A stalled provider must not hold the request forever
            reply = await asyncio.wait_for(
                self.provider.complete(
                    build_prompt(self.settings.COMPLETION_SYSTEM_PROMPT, content, history),
                    LLMConfig(
                        model=chat.model,
                        temperature=self.settings.COMPLETION_TEMPERATURE,
                        max_tokens=self.settings.COMPLETION_MAX_TOKENS
                    )
                ),
                timeout=self.settings.COMPLETION_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            logger.error(f"AI API error for chat {chat.id}: no response within {self.settings.COMPLETION_TIMEOUT_SECONDS}s")
            return [user_message]
        except Exception as e:
            logger.error(f"AI API error for chat {chat.id}: {e!r}")
            return [user_message]

        if not reply.content or not reply.content.strip():
            logger.error(f"AI API error for chat {chat.id}: empty response from {chat.model}")
            return [user_message]

        try:
            ai_message = await self.storage.insert_message(
                chat_id=chat.id,
                role=MessageRole.ASSISTANT,
                content=reply.content,
                username=username,
                model=chat.model
            )
        except SQLAlchemyError:
            logger.exception(f"Failed to store assistant reply for chat {chat.id}")
            return [user_message]

        return [user_message, ai_message]

    async def _history(self, chat_id: int, current_message_id: int) -> list[MessageModel]:
        turns = self.settings.COMPLETION_CONTEXT_TURNS
        if turns <= 0:
            return []
        messages = await self.storage.list_messages(chat_id)
        earlier = [m for m in messages if m.id != current_message_id]
        return earlier[-turns:]
