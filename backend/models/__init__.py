"""Data models for FitCoach AI chat backend."""
from .conversation import Turn, USER_ROLE, ASSISTANT_ROLE, ROLES
from .api import ChatMessage, ChatRequest, ReportRequest, ChatResponse, ErrorResponse

__all__ = [
    "Turn",
    "USER_ROLE",
    "ASSISTANT_ROLE",
    "ROLES",
    "ChatMessage",
    "ChatRequest",
    "ReportRequest",
    "ChatResponse",
    "ErrorResponse",
]
