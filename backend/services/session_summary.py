"""
Session summary for FitCoach reports.

Counts the turns of a transcript and tags it with fitness topics found by
case-insensitive keyword matching.
"""
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Sequence

from models.conversation import Turn, USER_ROLE, ASSISTANT_ROLE

logger = logging.getLogger(__name__)

MAX_TOPICS = 8

# Keyword -> topic label; dictionary order decides label order
TOPIC_KEYWORDS: Dict[str, str] = {
    "workout": "Workout Plans",
    "exercise": "Exercise Routines",
    "cardio": "Cardio Training",
    "strength": "Strength Training",
    "weight": "Weight Management",
    "diet": "Diet & Nutrition",
    "nutrition": "Diet & Nutrition",
    "protein": "Protein & Macros",
    "meal": "Meal Planning",
    "stretch": "Stretching & Flexibility",
    "recovery": "Recovery",
    "sleep": "Sleep & Rest",
    "running": "Running",
    "yoga": "Yoga",
    "hiit": "HIIT Training",
    "abs": "Core Training",
    "muscle": "Muscle Building",
    "fat": "Fat Loss",
    "beginner": "Beginner Fitness",
    "motivation": "Motivation",
    "injury": "Injury Prevention",
    "flexibility": "Flexibility",
    "calorie": "Calorie Tracking",
}


@dataclass
class SessionSummary:
    """Aggregate figures shown in the report's summary block."""
    total_messages: int
    user_messages: int
    assistant_messages: int
    topics: List[str] = field(default_factory=list)


def extract_topics(turns: Sequence[Turn], max_topics: int = MAX_TOPICS) -> List[str]:
    """
    Find the topic labels mentioned anywhere in a transcript.

    Matching is substring-based, so "abs" also fires on "absolutely".

    Returns:
        Distinct labels in order of first match, at most max_topics of them
    """
    all_text = " ".join(turn.content.lower() for turn in turns)

    found: List[str] = []
    for keyword, topic in TOPIC_KEYWORDS.items():
        if keyword in all_text and topic not in found:
            found.append(topic)

    return found[:max_topics]


def summarize_session(turns: Sequence[Turn]) -> SessionSummary:
    user_messages = sum(1 for turn in turns if turn.role == USER_ROLE)
    assistant_messages = sum(1 for turn in turns if turn.role == ASSISTANT_ROLE)
    topics = extract_topics(turns)
    logger.debug(f"Summarized session: {len(turns)} turns, topics={topics}")
    return SessionSummary(
        total_messages=len(turns),
        user_messages=user_messages,
        assistant_messages=assistant_messages,
        topics=topics
    )
