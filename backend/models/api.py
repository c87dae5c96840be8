"""Request and response models for the chat HTTP API."""
from typing import List, Literal

from pydantic import BaseModel, Field

from .conversation import Turn


class ChatMessage(BaseModel):
    """One turn as sent over the wire."""
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)

    def to_turn(self) -> Turn:
        return Turn(role=self.role, content=self.content)


class ChatRequest(BaseModel):
    """Chat request with the full message history, oldest first."""
    messages: List[ChatMessage] = Field(min_length=1)

    def to_turns(self) -> List[Turn]:
        return [message.to_turn() for message in self.messages]


class ReportRequest(BaseModel):
    """Report request; an empty transcript still yields a report."""
    messages: List[ChatMessage] = Field(default_factory=list)

    def to_turns(self) -> List[Turn]:
        return [message.to_turn() for message in self.messages]


class ChatResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
