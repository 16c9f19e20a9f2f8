from __future__ import annotations  # Practice session domain models

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Category = Literal["Technical", "Behavioral", "Experience", "Problem-Solving", "Company-Specific", "General"]
Difficulty = Literal["easy", "medium", "hard"]
SessionStatus = Literal["pending", "in_progress", "completed", "failed"]

CATEGORIES: tuple[str, ...] = ("Technical", "Behavioral", "Experience", "Problem-Solving", "Company-Specific")
DEFAULT_CATEGORY = "General"
DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobContext(BaseModel):  # Role details sent alongside each answer for scoring
    job_title: str
    company: str
    job_description: str


class SessionConfig(BaseModel):  # Candidate setup form, frozen once questions exist
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    job_title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    job_description: str = Field(min_length=1)
    resume_text: str = Field(min_length=1)

    def job_context(self) -> JobContext:
        return JobContext(job_title=self.job_title, company=self.company, job_description=self.job_description)


class InterviewQuestion(BaseModel):  # Single generated question
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    category: Category = DEFAULT_CATEGORY
    difficulty: Difficulty = "medium"
    suggested_answer_seconds: int = Field(default=120, gt=0)


class ResponseFeedback(BaseModel):  # Scored feedback for one answer
    model_config = ConfigDict(frozen=True)

    content_score: int = Field(ge=1, le=10)
    communication_score: int = Field(ge=1, le=10)
    confidence_score: int = Field(ge=1, le=10)
    detailed_feedback: str = Field(min_length=1)
    strengths: List[str] = Field(min_length=1, max_length=5)
    improvements: List[str] = Field(min_length=1, max_length=5)

    def mean_score(self) -> float:
        return (self.content_score + self.communication_score + self.confidence_score) / 3


class InterviewResponse(BaseModel):  # Committed answer for one question
    model_config = ConfigDict(frozen=True)

    question_id: str
    transcript: str
    response_time_seconds: int = Field(ge=0)
    feedback: ResponseFeedback
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Session(BaseModel):  # Single source of truth for one practice run
    id: str
    user_id: str
    config: SessionConfig
    questions: List[InterviewQuestion]
    responses: List[InterviewResponse] = Field(default_factory=list)
    status: SessionStatus = "pending"
    completion_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    overall_feedback: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    def question(self, question_id: str) -> Optional[InterviewQuestion]:
        return next((item for item in self.questions if item.id == question_id), None)

    def response_for(self, question_id: str) -> Optional[InterviewResponse]:
        return next((item for item in self.responses if item.question_id == question_id), None)

    def has_response_for(self, question_id: str) -> bool:
        return self.response_for(question_id) is not None


__all__ = [
    "CATEGORIES",
    "Category",
    "DEFAULT_CATEGORY",
    "DIFFICULTIES",
    "Difficulty",
    "InterviewQuestion",
    "InterviewResponse",
    "JobContext",
    "ResponseFeedback",
    "Session",
    "SessionConfig",
    "SessionStatus",
    "utcnow",
]
