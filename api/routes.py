"""FastAPI routes for generation, rendering and practice session control."""
from __future__ import annotations

import logging
from threading import Lock, RLock
from typing import Dict, List, Literal, Tuple

from fastapi import APIRouter, HTTPException, Query, Response
from fastapi.responses import JSONResponse

from api.schemas import (
    AdvanceReq,
    AnswerReq,
    AvatarVideoResp,
    FeedbackReq,
    PracticeSessionSummary,
    PracticeSessionView,
    QuestionsReq,
    QuestionsResp,
    RenderReq,
    StartPracticeReq,
)
from config import ServiceAvailability, settings
from generation import GenerationGateway, validate_questions
from interview_session.errors import ConfigValidationError, OrchestratorStateError, SessionPersistenceError
from interview_session.models import JobContext, ResponseFeedback, Session
from rendering import AvatarVideoRenderer, RenderingError, SpeechSynthesizer
from services.orchestrator import SessionOrchestrator, validate_config
from services.scoring import summarize
from session_reports import SessionReport, build_report, generate_session_report_pdf, report_filename, report_payload
from storage import InMemorySessionStore, SessionStore, build_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_registry_lock = RLock()
_orchestrators: Dict[str, SessionOrchestrator] = {}
_session_locks: Dict[str, Lock] = {}
# Orchestrators whose setup failed to persist, kept so a retry reuses the generated questions.
_pending_setups: Dict[str, SessionOrchestrator] = {}
_demo_store = InMemorySessionStore()


def _availability() -> ServiceAvailability:
    return ServiceAvailability.from_settings(settings)


def _gateway(availability: ServiceAvailability) -> GenerationGateway:
    return GenerationGateway.from_settings(settings, availability)


def _session_store(availability: ServiceAvailability) -> SessionStore:
    if not availability.persistence:
        return _demo_store
    return build_session_store(availability, settings)


def _config_error(exc: ConfigValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": "Missing required fields", "fields": exc.errors})


def _live(session_id: str) -> Tuple[SessionOrchestrator, Lock]:
    with _registry_lock:
        orchestrator = _orchestrators.get(session_id)
        lock = _session_locks.get(session_id)
    if orchestrator is None or lock is None:
        raise HTTPException(status_code=404, detail="session not found")
    return orchestrator, lock


def _discard(session_id: str) -> None:  # Completed or abandoned sessions are served from the store
    with _registry_lock:
        _orchestrators.pop(session_id, None)
        _session_locks.pop(session_id, None)


def _view(orchestrator: SessionOrchestrator) -> PracticeSessionView:
    session = orchestrator.session
    if session is None:
        raise HTTPException(status_code=409, detail="session has been reset")
    return PracticeSessionView(
        session_id=session.id,
        user_id=session.user_id,
        stage=orchestrator.stage,
        status=session.status,
        current_index=orchestrator.current_index,
        question_count=orchestrator.question_count,
        current_question=orchestrator.current_question,
        has_response=orchestrator.has_response(),
        can_go_previous=orchestrator.can_go_previous,
        can_go_next=orchestrator.can_go_next,
        can_complete=orchestrator.can_complete,
        responses=list(session.responses),
        completion_rate=session.completion_rate,
        overall_feedback=session.overall_feedback,
        event_log=list(orchestrator.events),
    )


def _summary_row(session: Session) -> PracticeSessionSummary:
    summary = summarize(session.questions, session.responses)
    return PracticeSessionSummary(
        session_id=session.id,
        job_title=session.config.job_title,
        company=session.config.company,
        status=session.status,
        completion_rate=session.completion_rate,
        answered_questions=summary.answered_questions,
        total_questions=summary.total_questions,
        created_at=session.created_at.isoformat(),
        completed_at=session.completed_at.isoformat() if session.completed_at else None,
    )


@router.post("/questions", response_model=QuestionsResp)
def generate_questions(req: QuestionsReq) -> QuestionsResp:
    try:
        config = validate_config(req.as_config())
    except ConfigValidationError as exc:
        raise _config_error(exc) from exc
    questions = _gateway(_availability()).generate_questions(config)
    return QuestionsResp(questions=questions)


@router.post("/feedback", response_model=ResponseFeedback)
def generate_feedback(req: FeedbackReq) -> ResponseFeedback:
    if not req.question or not (req.transcript or "").strip():
        raise HTTPException(status_code=400, detail="Missing required fields")
    question = validate_questions([req.question], 1)[0]
    job = JobContext(
        job_title=req.jobContext.jobTitle,
        company=req.jobContext.company,
        job_description=req.jobContext.jobDescription,
    )
    return _gateway(_availability()).generate_feedback(question, req.transcript, req.duration, job)


@router.post("/tts")
def synthesize_speech(req: RenderReq) -> Response:
    text = (req.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        result = SpeechSynthesizer(_availability(), settings).render(text)
    except RenderingError as exc:
        logger.exception("Speech synthesis failed")
        raise HTTPException(status_code=500, detail="Failed to generate audio") from exc
    if not result.configured:
        return JSONResponse({"configured": False, "message": result.message})
    return Response(content=result.content, media_type=result.mime_type or "audio/mpeg")


@router.post("/avatar-video", response_model=AvatarVideoResp)
def render_avatar_video(req: RenderReq) -> AvatarVideoResp:
    text = (req.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        result = AvatarVideoRenderer(_availability(), settings).render(text)
    except RenderingError as exc:
        logger.exception("Avatar video rendering failed")
        raise HTTPException(status_code=500, detail="Failed to generate video") from exc
    return AvatarVideoResp(
        configured=result.configured,
        video_url=result.video_url,
        video_id=result.video_id,
        status=result.status,
        message=result.message,
    )


@router.post("/practice-sessions", response_model=PracticeSessionView, status_code=201)
def start_practice_session(req: StartPracticeReq) -> PracticeSessionView:
    with _registry_lock:
        orchestrator = _pending_setups.get(req.userId)
    if orchestrator is None:
        availability = _availability()
        orchestrator = SessionOrchestrator(_gateway(availability), _session_store(availability), req.userId)
    try:
        session = orchestrator.begin_setup(req.as_config())
    except ConfigValidationError as exc:
        raise _config_error(exc) from exc
    except SessionPersistenceError as exc:
        with _registry_lock:
            _pending_setups[req.userId] = orchestrator
        raise HTTPException(status_code=503, detail="Failed to create session, please retry") from exc

    with _registry_lock:
        _pending_setups.pop(req.userId, None)
        _orchestrators[session.id] = orchestrator
        _session_locks[session.id] = Lock()
    return _view(orchestrator)


@router.get("/practice-sessions/{session_id}", response_model=PracticeSessionView)
def fetch_practice_session(session_id: str) -> PracticeSessionView:
    orchestrator, lock = _live(session_id)
    with lock:
        return _view(orchestrator)


@router.post("/practice-sessions/{session_id}/answers", response_model=PracticeSessionView)
def record_answer(session_id: str, req: AnswerReq) -> PracticeSessionView:
    orchestrator, lock = _live(session_id)
    transcript = (req.transcript or "").strip()
    if not transcript:
        raise HTTPException(status_code=400, detail="Transcript is required")
    with lock:
        try:
            orchestrator.record_answer(transcript, req.duration, audio_url=req.audioUrl, video_url=req.videoUrl)
        except OrchestratorStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _view(orchestrator)


@router.post("/practice-sessions/{session_id}/advance", response_model=PracticeSessionView)
def advance_question(session_id: str, req: AdvanceReq) -> PracticeSessionView:
    orchestrator, lock = _live(session_id)
    with lock:
        try:
            orchestrator.advance(req.delta)
        except OrchestratorStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _view(orchestrator)


@router.post("/practice-sessions/{session_id}/complete", response_model=PracticeSessionView)
def complete_practice_session(session_id: str) -> PracticeSessionView:
    orchestrator, lock = _live(session_id)
    with lock:
        try:
            orchestrator.complete()
        except OrchestratorStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except SessionPersistenceError as exc:
            raise HTTPException(status_code=503, detail="Failed to save session, please retry") from exc
        view = _view(orchestrator)
    _discard(session_id)
    return view


@router.delete("/practice-sessions/{session_id}", status_code=204)
def discard_practice_session(session_id: str) -> Response:
    orchestrator, lock = _live(session_id)
    with lock:
        orchestrator.reset()
    _discard(session_id)
    return Response(status_code=204)


def _load_report(session_id: str) -> SessionReport:
    with _registry_lock:
        orchestrator = _orchestrators.get(session_id)
    if orchestrator is not None and orchestrator.session is not None:
        return orchestrator.report()
    try:
        session = _session_store(_availability()).get(session_id)
    except SessionPersistenceError as exc:
        raise HTTPException(status_code=503, detail="Failed to load session") from exc
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    return build_report(session)


@router.get("/practice-sessions/{session_id}/report")
def fetch_report(
    session_id: str,
    fmt: Literal["json", "pdf"] = Query("json", alias="format"),
) -> Response:
    report = _load_report(session_id)
    if fmt == "pdf":
        filename = report_filename(report, "pdf")
        return Response(
            content=generate_session_report_pdf(report),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    filename = report_filename(report)
    return JSONResponse(
        content=report_payload(report),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/users/{user_id}/practice-sessions", response_model=List[PracticeSessionSummary])
def list_practice_sessions(user_id: str) -> List[PracticeSessionSummary]:
    try:
        sessions = _session_store(_availability()).list_by_user(user_id)
    except SessionPersistenceError as exc:
        raise HTTPException(status_code=503, detail="Failed to load sessions") from exc
    return [_summary_row(session) for session in sessions]


def clear_registry() -> None:  # Drop live orchestrators, used between test runs
    with _registry_lock:
        _orchestrators.clear()
        _session_locks.clear()
        _pending_setups.clear()


def live_session_count() -> int:
    with _registry_lock:
        return len(_orchestrators)
