from __future__ import annotations  # Pure report construction for external formatters

from datetime import datetime
from typing import Any, Dict, Optional

from interview_session.models import Session, utcnow
from services.scoring import summarize

from .models import SessionReport


def build_report(session: Session, *, generated_at: Optional[datetime] = None) -> SessionReport:  # Snapshot session and score summary
    return SessionReport(
        session_id=session.id,
        config=session.config,
        questions=list(session.questions),
        responses=list(session.responses),
        generated_at=generated_at or utcnow(),
        summary=summarize(session.questions, session.responses),
    )


def report_payload(report: SessionReport) -> Dict[str, Any]:  # JSON-ready dict for download
    return report.model_dump(mode="json")


def report_filename(report: SessionReport, extension: str = "json") -> str:  # Dated download name
    return f"interview-report-{report.generated_at.date().isoformat()}.{extension}"


__all__ = ["build_report", "report_filename", "report_payload"]
