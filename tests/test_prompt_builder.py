"""Unit tests for conversation prompt flattening."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import pytest
from models.conversation import Turn
from services.prompt_builder import build_prompt, SYSTEM_INSTRUCTION


class TestBuildPrompt:
    """Test suite for build_prompt."""

    def test_single_user_turn(self):
        """Test a single turn gets the User label."""
        prompt = build_prompt([Turn(role="user", content="How do I start running?")])

        assert prompt == "User: How do I start running?"

    def test_assistant_turns_are_labelled_coach(self):
        """Test assistant turns use the Coach label."""
        turns = [
            Turn(role="user", content="Hi"),
            Turn(role="assistant", content="Hey champ!"),
        ]

        assert build_prompt(turns) == "User: Hi\n\nCoach: Hey champ!"

    @pytest.mark.parametrize("count", [1, 2, 5, 12])
    def test_segment_count_and_order(self, count):
        """Test N turns yield N labelled segments in original order."""
        turns = [
            Turn(role="user" if i % 2 == 0 else "assistant", content=f"message {i}")
            for i in range(count)
        ]

        segments = build_prompt(turns).split("\n\n")

        assert len(segments) == count
        for i, segment in enumerate(segments):
            label = "User" if i % 2 == 0 else "Coach"
            assert segment == f"{label}: message {i}"

    def test_multiline_content_is_kept(self):
        """Test single newlines inside content survive flattening."""
        turns = [Turn(role="assistant", content="- Squats\n- Lunges")]

        assert build_prompt(turns) == "Coach: - Squats\n- Lunges"

    def test_does_not_mutate_turns(self):
        """Test the input list is left untouched."""
        turns = [Turn(role="user", content="A"), Turn(role="assistant", content="B")]
        snapshot = list(turns)

        build_prompt(turns)

        assert turns == snapshot

    def test_system_instruction_describes_coach(self):
        """Test the fixed system instruction sets up the FitCoach persona."""
        assert "FitCoach AI" in SYSTEM_INSTRUCTION
        assert "medical professional" in SYSTEM_INSTRUCTION
