from __future__ import annotations  # Session report domain models

from datetime import datetime
from typing import List

from pydantic import BaseModel

from interview_session.models import InterviewQuestion, InterviewResponse, SessionConfig
from services.scoring import ScoreSummary


class SessionReport(BaseModel):  # Serializable export of one practice session
    session_id: str
    config: SessionConfig
    questions: List[InterviewQuestion]
    responses: List[InterviewResponse]
    generated_at: datetime
    summary: ScoreSummary


__all__ = ["SessionReport"]
