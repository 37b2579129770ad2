# modelchat/services/storage.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import ChatModel, MessageModel, as_utc, new_public_id
from ..schemas.chat import MessageRole
from ..utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

UPDATABLE_CHAT_FIELDS = ("title", "model")
# Surrogate ids are positive 64-bit integers
MAX_SURROGATE_ID = 2 ** 63 - 1


class ChatStorage:
    """Durable record of chats and their messages.

    Every write runs in its own transaction and is rolled back as a whole on
    failure, so a half-written chat or message is never visible.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_chats(self) -> list[ChatModel]:
        result = await self.db.execute(
            select(ChatModel).order_by(ChatModel.created_at, ChatModel.id)
        )
        return list(result.scalars().all())

    async def get_chat(self, chat_id: int) -> Optional[ChatModel]:
        if not 0 < chat_id <= MAX_SURROGATE_ID:
            return None
        result = await self.db.execute(select(ChatModel).filter(ChatModel.id == chat_id))
        return result.scalar_one_or_none()

    async def get_chat_by_public_id(self, public_id: str) -> Optional[ChatModel]:
        result = await self.db.execute(select(ChatModel).filter(ChatModel.public_id == public_id))
        return result.scalar_one_or_none()

    async def create_chat(self, title: str, model: str) -> ChatModel:
        _check_text("title", title)
        _check_text("model", model)

        chat = ChatModel(
            public_id=new_public_id(),
            title=title,
            model=model,
            created_at=datetime.now(timezone.utc)
        )
        self.db.add(chat)
        await self._commit()
        logger.info(f"Created chat {chat.id} ({chat.public_id}) using {chat.model}")
        return chat

    async def update_chat(self, chat_id: int, fields: dict[str, Any]) -> ChatModel:
        changes = {
            key: value for key, value in fields.items()
            if key in UPDATABLE_CHAT_FIELDS and value is not None
        }
        for key, value in changes.items():
            _check_text(key, value)

        chat = await self.get_chat(chat_id)
        if not chat:
            raise NotFoundError(details={"id": chat_id})

        for key, value in changes.items():
            setattr(chat, key, value)
        await self._commit()
        return chat

    async def delete_chat(self, chat_id: int) -> bool:
        """Delete a chat and all of its messages. Returns False if it did not exist."""
        chat = await self.get_chat(chat_id)
        if not chat:
            return False

        await self.db.execute(delete(MessageModel).where(MessageModel.chat_id == chat_id))
        await self.db.delete(chat)
        await self._commit()
        logger.info(f"Deleted chat {chat_id}")
        return True

    async def list_messages(self, chat_id: int) -> list[MessageModel]:
        result = await self.db.execute(
            select(MessageModel)
            .filter(MessageModel.chat_id == chat_id)
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        return list(result.scalars().all())

    async def insert_message(
            self,
            chat_id: int,
            role: MessageRole | str,
            content: str,
            username: str,
            model: str
    ) -> MessageModel:
        try:
            role = MessageRole(role)
        except ValueError:
            raise ValidationError(f"Unknown message role: {role}")

        created_at = datetime.now(timezone.utc)
        latest = as_utc(await self.db.scalar(
            select(func.max(MessageModel.created_at)).filter(MessageModel.chat_id == chat_id)
        ))
        if latest is not None and created_at <= latest:
            # Clock ties must not break the ordering of a chat
            created_at = latest + timedelta(microseconds=1)

        message = MessageModel(
            chat_id=chat_id,
            role=role.value,
            content=content,
            username=username,
            model=model,
            created_at=created_at
        )
        self.db.add(message)
        await self._commit()
        return message

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise


def _check_text(field: str, value: Any) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must not be empty", {"field": field})