from famcare.models.chat_message import ChatMessage
from famcare.models.family import Family
from famcare.models.refresh_token import RefreshToken
from famcare.models.user import FamilyRole, User

__all__ = [
    "ChatMessage",
    "Family",
    "FamilyRole",
    "RefreshToken",
    "User",
]
