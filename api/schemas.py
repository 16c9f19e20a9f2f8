"""Pydantic schemas for the practice session API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from interview_session.models import InterviewQuestion, InterviewResponse, SessionStatus


class QuestionsReq(BaseModel):
    jobTitle: Optional[str] = None
    company: Optional[str] = None
    jobDescription: Optional[str] = None
    resumeContent: Optional[str] = None

    def as_config(self) -> Dict[str, Optional[str]]:
        return {
            "job_title": self.jobTitle,
            "company": self.company,
            "job_description": self.jobDescription,
            "resume_text": self.resumeContent,
        }


class QuestionsResp(BaseModel):
    questions: List[InterviewQuestion]


class JobContextPayload(BaseModel):
    jobTitle: str = ""
    company: str = ""
    jobDescription: str = ""


class FeedbackReq(BaseModel):
    question: Optional[Dict[str, Any]] = None
    transcript: Optional[str] = None
    duration: float = Field(default=60, ge=0)
    jobContext: JobContextPayload = Field(default_factory=JobContextPayload)


class RenderReq(BaseModel):
    text: Optional[str] = None


class AvatarVideoResp(BaseModel):
    configured: bool
    video_url: Optional[str] = None
    video_id: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None


class StartPracticeReq(QuestionsReq):
    userId: str = Field(min_length=1)


class AnswerReq(BaseModel):
    transcript: Optional[str] = None
    duration: float = Field(default=0, ge=0)
    audioUrl: Optional[str] = None
    videoUrl: Optional[str] = None


class AdvanceReq(BaseModel):
    delta: int = 1


class PracticeSessionView(BaseModel):
    session_id: str
    user_id: str
    stage: str
    status: SessionStatus
    current_index: int
    question_count: int
    current_question: Optional[InterviewQuestion] = None
    has_response: bool = False
    can_go_previous: bool = False
    can_go_next: bool = False
    can_complete: bool = False
    responses: List[InterviewResponse] = Field(default_factory=list)
    completion_rate: float = 0
    overall_feedback: Optional[str] = None
    event_log: List[Dict[str, Any]] = Field(default_factory=list)


class PracticeSessionSummary(BaseModel):
    session_id: str
    job_title: str
    company: str
    status: SessionStatus
    completion_rate: float
    answered_questions: int
    total_questions: int
    created_at: str
    completed_at: Optional[str] = None
