# modelchat/api/messages.py
from fastapi import Depends

from . import Endpoint, build_router
from ..dependencies import get_chat_service
from ..schemas.chat import Message, MessageCreate
from ..services.chat import ChatService
from ..services.rate_limit import RateLimitInfo, enforce_message_rate_limit


async def send_message(
        message: MessageCreate,
        rate_limit: RateLimitInfo = Depends(enforce_message_rate_limit),
        chat_service: ChatService = Depends(get_chat_service)
):
    """Store the message and return it, followed by the AI reply when there is one"""
    return await chat_service.send(message.chat_id, message.content, message.username)


ENDPOINTS = (
    Endpoint("POST", "/messages", send_message, response_model=list[Message]),
)

router = build_router(ENDPOINTS, tags=["messages"])
