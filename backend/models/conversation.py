"""Conversation data models."""
from dataclasses import dataclass

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
ROLES = (USER_ROLE, ASSISTANT_ROLE)


@dataclass(frozen=True)
class Turn:
    """A single message in a chat session, identified only by its position."""
    role: str  # "user" or "assistant"
    content: str

    @property
    def is_user(self) -> bool:
        return self.role == USER_ROLE
