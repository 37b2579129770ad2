# modelchat/services/resolver.py
import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .storage import ChatStorage
from ..db.models import ChatModel
from ..utils.errors import NotFoundError

_INTEGER = re.compile(r"[+-]?[0-9]+")


class IdentifierKind(str, Enum):
    SURROGATE = "surrogate"
    PUBLIC = "public"


@dataclass(frozen=True)
class ChatIdentifier:
    kind: IdentifierKind
    value: Union[int, str]


def parse_identifier(raw: Union[int, str]) -> ChatIdentifier:
    """Classify a client supplied chat reference.

    Anything that reads as a base-10 integer is a surrogate id, even if a
    public id with the same text existed. Public ids are generated so that
    this can never happen.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return ChatIdentifier(IdentifierKind.SURROGATE, raw)

    text = str(raw).strip()
    if _INTEGER.fullmatch(text):
        return ChatIdentifier(IdentifierKind.SURROGATE, int(text))
    return ChatIdentifier(IdentifierKind.PUBLIC, text)


async def resolve_chat(storage: ChatStorage, raw: Union[int, str]) -> ChatModel:
    identifier = parse_identifier(raw)
    if identifier.kind is IdentifierKind.SURROGATE:
        chat = await storage.get_chat(identifier.value)
    else:
        chat = await storage.get_chat_by_public_id(identifier.value)

    if not chat:
        raise NotFoundError(details={"identifier": str(raw)})
    return chat
