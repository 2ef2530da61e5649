from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str

    @staticmethod
    def system(content: str) -> "ChatMessage":
        return ChatMessage(role=ChatRole.SYSTEM, content=content)

    @staticmethod
    def user(content: str) -> "ChatMessage":
        return ChatMessage(role=ChatRole.USER, content=content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
        }
