# modelchat/api/chat.py
from fastapi import Depends, Response

from . import Endpoint, build_router
from ..dependencies import get_chat_service
from ..schemas.chat import Chat, ChatCreate, ChatUpdate, Message
from ..services.chat import ChatService


async def list_chats(
        chat_service: ChatService = Depends(get_chat_service)
):
    return await chat_service.list_chats()


async def get_chat(
        identifier: str,
        chat_service: ChatService = Depends(get_chat_service)
):
    """Look a chat up by numeric id or by public id"""
    return await chat_service.get_chat(identifier)


async def list_messages(
        identifier: str,
        chat_service: ChatService = Depends(get_chat_service)
):
    return await chat_service.list_messages(identifier)


async def create_chat(
        chat: ChatCreate,
        chat_service: ChatService = Depends(get_chat_service)
):
    return await chat_service.create_chat(chat.title, chat.model)


async def update_chat(
        chat_id: int,
        chat_update: ChatUpdate,
        chat_service: ChatService = Depends(get_chat_service)
):
    return await chat_service.update_chat(chat_id, chat_update.model_dump(exclude_none=True))


async def delete_chat(
        chat_id: int,
        chat_service: ChatService = Depends(get_chat_service)
):
    await chat_service.delete_chat(chat_id)
    return Response(status_code=204)


ENDPOINTS = (
    Endpoint("GET", "/chats", list_chats, response_model=list[Chat]),
    Endpoint("GET", "/chats/{identifier}", get_chat, response_model=Chat),
    Endpoint("GET", "/chats/{identifier}/messages", list_messages, response_model=list[Message]),
    Endpoint("POST", "/chats", create_chat, response_model=Chat),
    Endpoint("PATCH", "/chats/{chat_id}", update_chat, response_model=Chat),
    Endpoint("DELETE", "/chats/{chat_id}", delete_chat, status_code=204),
)

router = build_router(ENDPOINTS, tags=["chats"])
