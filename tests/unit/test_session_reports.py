from datetime import datetime, timezone

from interview_session.models import (
    InterviewQuestion,
    InterviewResponse,
    ResponseFeedback,
    Session,
    SessionConfig,
)
from session_reports import build_report, generate_session_report_pdf, report_filename, report_payload


def _session(answered: int = 1) -> Session:
    questions = [
        InterviewQuestion(id=f"q{i}", text=f"Question {i}", category="Technical", difficulty="medium", suggested_answer_seconds=90)
        for i in range(3)
    ]
    feedback = ResponseFeedback(
        content_score=8,
        communication_score=7,
        confidence_score=6,
        detailed_feedback="Solid structure with a clear outcome – add metrics.",
        strengths=["Clear"],
        improvements=["Metrics"],
    )
    responses = [
        InterviewResponse(question_id=f"q{i}", transcript=f"Answer {i}", response_time_seconds=50, feedback=feedback)
        for i in range(answered)
    ]
    return Session(
        id="s1",
        user_id="u1",
        config=SessionConfig(job_title="SRE", company="Umbrella", job_description="Keep it up", resume_text="On-call"),
        questions=questions,
        responses=responses,
        status="in_progress",
    )


def test_build_report_snapshots_session_and_summary():
    generated = datetime(2024, 3, 9, 15, 30, tzinfo=timezone.utc)
    report = build_report(_session(), generated_at=generated)

    assert report.session_id == "s1"
    assert report.generated_at == generated
    assert report.summary.answered_questions == 1
    assert report.summary.total_questions == 3
    assert report.summary.overall_score == 7
    assert report.summary.total_response_time == 50


def test_report_filename_and_payload():
    report = build_report(_session(), generated_at=datetime(2024, 3, 9, tzinfo=timezone.utc))

    assert report_filename(report) == "interview-report-2024-03-09.json"
    assert report_filename(report, "pdf") == "interview-report-2024-03-09.pdf"
    payload = report_payload(report)
    assert payload["config"]["company"] == "Umbrella"
    assert payload["summary"]["averages"]["content"] == 8
    assert payload["generated_at"].startswith("2024-03-09")


def test_empty_report_has_no_averages():
    report = build_report(_session(answered=0))
    assert report.summary.overall_score is None
    assert report.summary.averages.content is None


def test_pdf_renders_bytes():
    payload = generate_session_report_pdf(build_report(_session(answered=2)))
    assert payload.startswith(b"%PDF")
    assert len(payload) > 500
