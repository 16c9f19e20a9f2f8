"""Score aggregation over a session's responses.

Every value here is derived from the response list on demand; nothing is
cached. Category means are ``None`` for an empty collection so callers have
to decide how to render "no data" instead of receiving a silent zero.
"""
from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel

from interview_session.models import InterviewQuestion, InterviewResponse


class CategoryMeans(BaseModel):
    content: Optional[float] = None
    communication: Optional[float] = None
    confidence: Optional[float] = None

    @property
    def defined(self) -> bool:
        return self.content is not None


class ScoreSummary(BaseModel):
    total_questions: int
    answered_questions: int
    completion_rate: float
    averages: CategoryMeans
    overall_score: Optional[float] = None
    total_response_time: int = 0


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def response_score(response: InterviewResponse) -> float:
    """Mean of the three category scores for one answer."""
    return response.feedback.mean_score()


def category_means(responses: Sequence[InterviewResponse]) -> CategoryMeans:
    return CategoryMeans(
        content=_mean([item.feedback.content_score for item in responses]),
        communication=_mean([item.feedback.communication_score for item in responses]),
        confidence=_mean([item.feedback.confidence_score for item in responses]),
    )


def overall_score(means: CategoryMeans) -> Optional[float]:
    if not means.defined:
        return None
    return (means.content + means.communication + means.confidence) / 3  # type: ignore[operator]


def completion_rate(answered: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, answered / total * 100)


def total_response_time(responses: Sequence[InterviewResponse]) -> int:
    return sum(item.response_time_seconds for item in responses)


def summarize(questions: Sequence[InterviewQuestion], responses: Sequence[InterviewResponse]) -> ScoreSummary:
    means = category_means(responses)
    return ScoreSummary(
        total_questions=len(questions),
        answered_questions=len(responses),
        completion_rate=completion_rate(len(responses), len(questions)),
        averages=means,
        overall_score=overall_score(means),
        total_response_time=total_response_time(responses),
    )


def overall_feedback(questions: Sequence[InterviewQuestion], responses: Sequence[InterviewResponse]) -> str:
    """One-line session summary stored on completion."""

    score = overall_score(category_means(responses))
    score_text = f"{score:.1f}/10" if score is not None else "n/a"
    return (
        f"Interview completed with {len(responses)} out of {len(questions)} questions answered. "
        f"Average score: {score_text}. Great job on completing the interview practice session!"
    )


__all__ = [
    "CategoryMeans",
    "ScoreSummary",
    "category_means",
    "completion_rate",
    "overall_feedback",
    "overall_score",
    "response_score",
    "summarize",
    "total_response_time",
]
