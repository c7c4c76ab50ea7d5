"""Import all models so Base.metadata sees every table."""
from presence_chat.infrastructure.db.models.message import ChatMessageModel
from presence_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "ChatMessageModel",
    "UserModel",
]
