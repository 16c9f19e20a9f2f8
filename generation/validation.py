"""Normalization and clamping of untrusted question / feedback payloads.

Everything produced by the reasoning service (and, for symmetry, by the local
fallback generator) passes through here before it becomes a domain model.
The helpers never raise for odd field values; they substitute defaults. Only
a payload with the wrong overall shape (not an object, too few questions) is
rejected so the caller can switch to the fallback path.
"""
from __future__ import annotations

import json
import math
import time
import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from interview_session.models import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DIFFICULTIES,
    InterviewQuestion,
    ResponseFeedback,
)

DEFAULT_SCORE = 7
MIN_SCORE = 1
MAX_SCORE = 10
MAX_LIST_ENTRIES = 5
DEFAULT_SUGGESTED_SECONDS = 120
DEFAULT_DIFFICULTY = "medium"
DEFAULT_DETAILED_FEEDBACK = "Good response overall. Keep practicing to improve further."
DEFAULT_STRENGTHS = ("Clear communication", "Relevant examples", "Professional demeanor")
DEFAULT_IMPROVEMENTS = ("Add more specific details", "Structure your response better", "Show more enthusiasm")

IdFactory = Callable[[int], str]


class QuestionBatch(BaseModel):  # Upstream question list, either bare array or {"questions": [...]}
    questions: List[Dict[str, Any]]

    @classmethod
    def from_raw_content(cls, content: str) -> "QuestionBatch":
        data = json.loads(content)
        if isinstance(data, list):
            return cls.model_validate({"questions": data})
        return cls.model_validate(data)


class FeedbackPayload(BaseModel):  # Upstream feedback object with every field optional
    model_config = ConfigDict(extra="ignore")

    content_score: Any = None
    communication_score: Any = None
    confidence_score: Any = None
    detailed_feedback: Any = None
    strengths: Any = None
    improvements: Any = None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clamp_score(value: Any, default: int = DEFAULT_SCORE) -> int:
    """Integer score in [1, 10]; non-numeric or missing values become ``default``."""
    if not _is_number(value):
        return default
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(float(value))))


def clean_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def bounded_list(value: Any, default: Sequence[str], limit: int = MAX_LIST_ENTRIES) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return list(default)
    entries = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    if not entries:
        return list(default)
    return entries[:limit]


def normalize_category(value: Any) -> str:
    if not isinstance(value, str):
        return DEFAULT_CATEGORY
    key = value.strip().casefold().replace(" ", "-").replace("_", "-")
    for category in CATEGORIES:
        if category.casefold() == key:
            return category
    return DEFAULT_CATEGORY


def normalize_difficulty(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in DIFFICULTIES:
        return value.strip().lower()
    return DEFAULT_DIFFICULTY


def normalize_seconds(value: Any) -> int:
    if not _is_number(value):
        return DEFAULT_SUGGESTED_SECONDS
    seconds = round_half_up(float(value))
    return seconds if seconds > 0 else DEFAULT_SUGGESTED_SECONDS


def time_based_id(index: int) -> str:
    return f"q_{int(time.time() * 1000)}_{index + 1}"


def validate_feedback(raw: FeedbackPayload | Mapping[str, Any]) -> ResponseFeedback:
    payload = raw if isinstance(raw, FeedbackPayload) else FeedbackPayload.model_validate(dict(raw))
    return ResponseFeedback(
        content_score=clamp_score(payload.content_score),
        communication_score=clamp_score(payload.communication_score),
        confidence_score=clamp_score(payload.confidence_score),
        detailed_feedback=clean_text(payload.detailed_feedback, DEFAULT_DETAILED_FEEDBACK),
        strengths=bounded_list(payload.strengths, DEFAULT_STRENGTHS),
        improvements=bounded_list(payload.improvements, DEFAULT_IMPROVEMENTS),
    )


def _question_text(item: Mapping[str, Any], index: int) -> str:
    return clean_text(item.get("question", item.get("text")), f"Sample question {index + 1}")


def _seconds_field(item: Mapping[str, Any]) -> Any:
    if "suggested_answer_seconds" in item:
        return item["suggested_answer_seconds"]
    return item.get("suggested_answer_length")


def validate_questions(
    items: Iterable[Mapping[str, Any]],
    count: int,
    *,
    id_factory: Optional[IdFactory] = None,
) -> List[InterviewQuestion]:
    """Normalize ``items`` into exactly ``count`` questions with unique ids.

    Raises:
        ValueError: fewer than ``count`` entries were supplied.
    """

    make_id = id_factory or time_based_id
    entries = list(items)
    if len(entries) < count:
        raise ValueError(f"expected {count} questions, got {len(entries)}")

    seen: set[str] = set()
    questions: List[InterviewQuestion] = []
    for index, item in enumerate(entries[:count]):
        qid = item.get("id")
        qid = qid.strip() if isinstance(qid, str) else ""
        if not qid or qid in seen:
            qid = make_id(index)
        while qid in seen:
            qid = f"{make_id(index)}_{uuid.uuid4().hex[:6]}"
        seen.add(qid)
        questions.append(
            InterviewQuestion(
                id=qid,
                text=_question_text(item, index),
                category=normalize_category(item.get("category")),
                difficulty=normalize_difficulty(item.get("difficulty")),
                suggested_answer_seconds=normalize_seconds(_seconds_field(item)),
            )
        )
    return questions


__all__ = [
    "DEFAULT_IMPROVEMENTS",
    "DEFAULT_SCORE",
    "DEFAULT_STRENGTHS",
    "DEFAULT_SUGGESTED_SECONDS",
    "FeedbackPayload",
    "IdFactory",
    "MAX_LIST_ENTRIES",
    "QuestionBatch",
    "bounded_list",
    "clamp_score",
    "clean_text",
    "normalize_category",
    "normalize_difficulty",
    "normalize_seconds",
    "round_half_up",
    "time_based_id",
    "validate_feedback",
    "validate_questions",
]
