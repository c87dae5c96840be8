"""Unit tests for the client-side ChatSession."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import json
import httpx
import pytest
from unittest.mock import Mock
from services.chat_session import ChatSession, GENERIC_FAILURE, QUICK_PROMPTS

API_URL = "http://testserver/api/chat"


def make_session(handler, **kwargs):
    transport = httpx.MockTransport(handler)
    return ChatSession(api_url=API_URL, http_client=httpx.Client(transport=transport), **kwargs)


class TestChatSession:
    """Test suite for ChatSession."""

    def test_send_appends_user_and_reply(self):
        """Test a successful exchange appends both turns in order."""
        session = make_session(lambda request: httpx.Response(200, json={"message": "Let's do it!"}))

        reply = session.send("Create a beginner workout plan")

        assert reply.content == "Let's do it!"
        assert [(t.role, t.content) for t in session.turns] == [
            ("user", "Create a beginner workout plan"),
            ("assistant", "Let's do it!"),
        ]
        assert session.is_loading is False

    def test_send_posts_full_history(self):
        """Test every request carries the whole conversation so far."""
        payloads = []

        def handler(request):
            payloads.append(json.loads(request.content))
            return httpx.Response(200, json={"message": f"reply {len(payloads)}"})

        session = make_session(handler)
        session.send("first")
        session.send("second")

        assert payloads[1] == {
            "messages": [
                {"role": "user", "content": "first"},
                {"role": "assistant", "content": "reply 1"},
                {"role": "user", "content": "second"},
            ]
        }

    def test_send_strips_and_ignores_empty_input(self):
        """Test whitespace-only input sends nothing."""
        handler = Mock()
        session = make_session(handler)

        assert session.send("   ") is None
        assert session.turns == []
        handler.assert_not_called()

    def test_send_ignored_while_loading(self):
        """Test a second submission is refused while one is in flight."""
        handler = Mock()
        session = make_session(handler)
        session.is_loading = True

        assert session.send("hello") is None
        assert session.turns == []
        handler.assert_not_called()

    def test_server_error_becomes_assistant_turn(self):
        """Test the server's error text is shown as the coach's reply."""
        session = make_session(lambda request: httpx.Response(
            500, json={"error": "The AI models are currently experiencing high demand. Please try again in a minute."}
        ))

        reply = session.send("hello")

        assert reply.role == "assistant"
        assert reply.content.startswith("The AI models are currently experiencing high demand")
        assert session.is_loading is False

    def test_server_error_without_text(self):
        """Test a bare error status falls back to a default message."""
        session = make_session(lambda request: httpx.Response(500, json={}))

        assert session.send("hello").content == "Failed to get response"

    def test_network_error_keeps_session_usable(self):
        """Test a connection failure is shown and the next send still works."""
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("Connection refused")
            return httpx.Response(200, json={"message": "Back online"})

        session = make_session(handler)

        first = session.send("hello")
        second = session.send("again")

        assert first.content == "Connection refused"
        assert second.content == "Back online"
        assert len(session.turns) == 4

    def test_invalid_json_becomes_assistant_turn(self):
        """Test an unparseable body is surfaced instead of raised."""
        session = make_session(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

        reply = session.send("hello")

        assert reply.role == "assistant"
        assert reply.content
        assert session.is_loading is False

    def test_missing_message_field(self):
        """Test a success body without a message is reported."""
        session = make_session(lambda request: httpx.Response(200, json={"answer": "x"}))

        assert session.send("hello").content == "Unexpected response from server"

    def test_empty_failure_text_uses_generic_message(self):
        """Test failures without text fall back to the generic apology."""
        def handler(request):
            raise httpx.ReadTimeout("")

        session = make_session(handler)

        assert session.send("hello").content == GENERIC_FAILURE

    def test_unexpected_error_still_gets_a_reply(self):
        """Test any failure while requesting ends up as the assistant turn."""
        def handler(request):
            raise RuntimeError("stream already consumed")

        session = make_session(handler)

        reply = session.send("hello")

        assert reply.role == "assistant"
        assert reply.content == "stream already consumed"
        assert [t.role for t in session.turns] == ["user", "assistant"]
        assert session.is_loading is False

    def test_export_report_empty_session(self, tmp_path):
        """Test nothing is exported before the first message."""
        session = make_session(Mock())

        assert session.export_report(tmp_path) is None
        assert list(tmp_path.iterdir()) == []

    def test_export_report_saves_pdf(self, tmp_path):
        """Test the report of the current turns is saved."""
        builder = Mock()
        builder.save.return_value = tmp_path / "FitCoach_Report_2026-10-19.pdf"
        session = make_session(
            lambda request: httpx.Response(200, json={"message": "Sure"}), report_builder=builder
        )
        session.send("hi")

        path = session.export_report(tmp_path)

        assert path == tmp_path / "FitCoach_Report_2026-10-19.pdf"
        builder.save.assert_called_once_with(session.turns, tmp_path)

    def test_quick_prompts(self):
        """Test the four starter prompts are offered."""
        assert len(QUICK_PROMPTS) == 4
        assert "How to start running?" in QUICK_PROMPTS
