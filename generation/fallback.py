"""Deterministic question and feedback generation used without the reasoning service."""
from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional

from interview_session.models import InterviewQuestion, ResponseFeedback, SessionConfig

from .validation import IdFactory, round_half_up, time_based_id, validate_feedback, validate_questions

FALLBACK_STRENGTHS = (
    "Clear and articulate communication",
    "Relevant content that addresses the question",
    "Professional and confident delivery",
    "Good use of examples and experiences",
    "Appropriate response length",
)

FALLBACK_IMPROVEMENTS = (
    "Add more specific metrics and quantifiable results",
    "Structure your response with a clearer beginning, middle, and end",
    "Include more concrete examples from your experience",
    "Show more enthusiasm and passion for the role",
    "Practice maintaining eye contact and confident body language",
)

CANNED_ENTRIES = 3


def _templates(job_title: str, company: str) -> List[Dict[str, Any]]:
    return [
        {
            "question": f"Tell me about yourself and why you're interested in the {job_title} position at {company}.",
            "category": "Behavioral",
            "difficulty": "easy",
            "suggested_answer_seconds": 90,
        },
        {
            "question": "Describe a challenging project you've worked on and how you overcame the obstacles.",
            "category": "Experience",
            "difficulty": "medium",
            "suggested_answer_seconds": 120,
        },
        {
            "question": "How do you stay updated with the latest technologies and industry trends?",
            "category": "Technical",
            "difficulty": "easy",
            "suggested_answer_seconds": 75,
        },
        {
            "question": "Walk me through how you would approach solving a complex problem you've never encountered before.",
            "category": "Problem-Solving",
            "difficulty": "hard",
            "suggested_answer_seconds": 150,
        },
        {
            "question": f"What do you know about {company} and why do you want to work here specifically?",
            "category": "Company-Specific",
            "difficulty": "medium",
            "suggested_answer_seconds": 100,
        },
    ]


def fallback_questions(
    config: SessionConfig,
    count: int = 5,
    *,
    id_factory: Optional[IdFactory] = None,
) -> List[InterviewQuestion]:
    """Return the fixed template set, cycled when more than five are requested."""

    templates = _templates(config.job_title, config.company)
    items = [dict(templates[index % len(templates)]) for index in range(count)]
    return validate_questions(items, count, id_factory=id_factory or time_based_id)


def word_count(transcript: str) -> int:
    return len(transcript.split()) if transcript else 0


def words_per_minute(words: int, duration_seconds: float) -> float:
    if duration_seconds <= 0:
        return 0.0
    return words / duration_seconds * 60


def fallback_feedback(
    transcript: str,
    duration_seconds: float,
    *,
    rng: Optional[random.Random] = None,
) -> ResponseFeedback:
    """Score an answer from its length and pace alone.

    Jitter terms are drawn from ``rng`` and are bounded so that content stays in
    [4, 10], communication in [6, 8] and confidence in [5, 8].
    """

    source = rng or random.Random()
    words = word_count(transcript)
    wpm = words_per_minute(words, duration_seconds)

    content = min(10.0, max(4.0, math.floor(words / 10) + source.random() * 3))
    communication = 8.0 if wpm > 120 else 6 + source.random() * 2
    confidence = 7.0 if duration_seconds > 30 else 5 + source.random() * 3

    duration_label = round_half_up(duration_seconds) if duration_seconds > 0 else 0
    detailed = (
        "Your response demonstrated good understanding of the question. You provided relevant "
        "information and maintained a professional tone throughout. The response length of "
        f"{duration_label} seconds was appropriate, and your speaking pace of approximately "
        f"{round_half_up(wpm)} words per minute was clear and easy to follow. Consider adding more "
        "specific examples to strengthen your answer and show more concrete evidence of your experience."
    )
    return validate_feedback(
        {
            "content_score": round_half_up(content),
            "communication_score": round_half_up(min(10.0, max(4.0, communication))),
            "confidence_score": round_half_up(min(10.0, max(4.0, confidence))),
            "detailed_feedback": detailed,
            "strengths": list(FALLBACK_STRENGTHS[:CANNED_ENTRIES]),
            "improvements": list(FALLBACK_IMPROVEMENTS[:CANNED_ENTRIES]),
        }
    )


__all__ = [
    "FALLBACK_IMPROVEMENTS",
    "FALLBACK_STRENGTHS",
    "fallback_feedback",
    "fallback_questions",
    "word_count",
    "words_per_minute",
]
