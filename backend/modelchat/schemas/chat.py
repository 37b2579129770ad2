# modelchat/schemas/chat.py
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from ..db.models import as_utc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatCreate(CamelModel):
    title: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)

    @field_validator("title", "model")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ChatUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = Field(None, min_length=1)

    @field_validator("title", "model")
    @classmethod
    def reject_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v


class Chat(CamelModel):
    id: int
    public_id: str
    title: str
    model: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def in_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class MessageCreate(CamelModel):
    chat_id: Union[StrictInt, StrictStr]
    content: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)


class Message(CamelModel):
    id: int
    chat_id: int
    role: MessageRole
    content: str
    username: str
    model: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def in_utc(cls, v: datetime) -> datetime:
        return as_utc(v)
