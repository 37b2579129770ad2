# modelchat/schemas/__init__.py
from .chat import (
    Chat,
    ChatCreate,
    ChatUpdate,
    Message,
    MessageCreate,
    MessageRole
)

from .model import (
    HealthStatus,
    ModelInfo
)

__all__ = [
    'Chat',
    'ChatCreate',
    'ChatUpdate',
    'Message',
    'MessageCreate',
    'MessageRole',
    'HealthStatus',
    'ModelInfo'
]
