"""In-memory chat session that talks to the FitCoach chat endpoint."""
import logging
from pathlib import Path
from typing import List, Optional, Union

import httpx

from config import CHAT_API_URL, CHAT_CLIENT_TIMEOUT, REPORT_DIR
from models.conversation import Turn, USER_ROLE, ASSISTANT_ROLE
from services.report_builder import ReportBuilder

logger = logging.getLogger(__name__)

QUICK_PROMPTS = [
    "Create a beginner workout plan",
    "Suggest a high-protein meal",
    "How to start running?",
    "Best exercises for abs",
]

GENERIC_FAILURE = "Sorry, something went wrong. Please try again."


class ChatSessionError(Exception):
    """The chat endpoint answered with an error payload."""


class ChatSession:
    """
    Client-side state of one conversation.

    Turns are append-only and live only in memory. While a request is
    outstanding `is_loading` is set and further submissions are ignored.
    Every failure ends up as the next assistant turn, so the session stays
    usable after an error.
    """

    def __init__(
        self,
        api_url: str = CHAT_API_URL,
        http_client: Optional[httpx.Client] = None,
        report_builder: Optional[ReportBuilder] = None
    ):
        self.api_url = api_url
        self.http_client = http_client or httpx.Client(timeout=CHAT_CLIENT_TIMEOUT)
        self.report_builder = report_builder or ReportBuilder()
        self.turns: List[Turn] = []
        self.is_loading = False

    def send(self, text: str) -> Optional[Turn]:
        """
        Submit a user message and wait for the coach's reply.

        Returns:
            The assistant turn appended for this message, or None when the
            input was empty or a request is already in flight
        """
        message_text = (text or "").strip()
        if not message_text or self.is_loading:
            return None

        self.turns.append(Turn(role=USER_ROLE, content=message_text))
        self.is_loading = True

        try:
            content = self._request_reply()
        except Exception as e:
            logger.warning(f"Chat request failed: {e}")
            content = str(e) or GENERIC_FAILURE
        finally:
            self.is_loading = False

        reply = Turn(role=ASSISTANT_ROLE, content=content)
        self.turns.append(reply)
        return reply

    def _request_reply(self) -> str:
        payload = {
            "messages": [{"role": turn.role, "content": turn.content} for turn in self.turns]
        }
        response = self.http_client.post(self.api_url, json=payload)
        data = response.json()
        if not isinstance(data, dict):
            raise ChatSessionError("Unexpected response from server")

        if not response.is_success:
            raise ChatSessionError(data.get("error") or "Failed to get response")

        message = data.get("message")
        if not isinstance(message, str):
            raise ChatSessionError("Unexpected response from server")
        return message

    def export_report(self, directory: Union[str, Path] = REPORT_DIR) -> Optional[Path]:
        """Save the PDF report of this session; nothing is written for an empty session."""
        if not self.turns:
            return None
        return self.report_builder.save(self.turns, directory)

    def close(self) -> None:
        self.http_client.close()
