"""Top-level practice session state machine.

Stages run ``setup -> questions -> feedback``. The orchestrator is the only
writer of its :class:`Session`; the generation gateway, the recording
controller and the session store are called into but never hold session
state. Persistence failures leave the in-memory state untouched so the same
call can be retried.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Mapping, Optional, Protocol, Tuple, Union

from generation import GenerationGateway
from interview_session.errors import ConfigValidationError, OrchestratorStateError, SessionPersistenceError
from interview_session.models import InterviewQuestion, InterviewResponse, Session, SessionConfig, utcnow
from observability import log_event, span
from recording import MediaArtifact, RecordedAnswer, RecordingController
from session_reports import SessionReport, build_report
from storage import SessionStore

from .scoring import ScoreSummary, completion_rate, overall_feedback, summarize

logger = logging.getLogger(__name__)

Stage = Literal["setup", "questions", "feedback"]

CONFIG_FIELD_MESSAGES: Dict[str, str] = {
    "job_title": "Please enter a job title",
    "company": "Please enter a company name",
    "job_description": "Please enter a job description",
    "resume_text": "Please provide your resume content",
}


class ArtifactUploader(Protocol):  # Stores a finished recording and returns its URL
    def upload(self, session_id: str, question_id: str, artifact: MediaArtifact) -> str: ...


def validate_config(raw: Union[SessionConfig, Mapping[str, Any]]) -> SessionConfig:
    """Return a frozen config or raise with one message per blank field."""

    if isinstance(raw, SessionConfig):
        return raw
    errors: Dict[str, str] = {}
    for field, message in CONFIG_FIELD_MESSAGES.items():
        value = raw.get(field)
        if not isinstance(value, str) or not value.strip():
            errors[field] = message
    if errors:
        raise ConfigValidationError(errors)
    return SessionConfig(**{field: raw[field] for field in CONFIG_FIELD_MESSAGES})


class SessionOrchestrator:
    def __init__(
        self,
        gateway: GenerationGateway,
        store: SessionStore,
        user_id: str,
        *,
        uploader: Optional[ArtifactUploader] = None,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._uploader = uploader
        self._user_id = user_id
        self._stage: Stage = "setup"
        self._session: Optional[Session] = None
        self._index = 0
        self._pending: Optional[Tuple[SessionConfig, List[InterviewQuestion]]] = None
        self.events: List[Dict[str, Any]] = []

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def question_count(self) -> int:
        return len(self._session.questions) if self._session else 0

    @property
    def current_question(self) -> Optional[InterviewQuestion]:
        if self._session is None or not self._session.questions:
            return None
        return self._session.questions[self._index]

    @property
    def can_go_previous(self) -> bool:
        return self._stage == "questions" and self._index > 0

    @property
    def can_go_next(self) -> bool:
        return self._stage == "questions" and self._index < self.question_count - 1

    @property
    def is_last_question(self) -> bool:
        return self._stage == "questions" and self._index == self.question_count - 1

    @property
    def can_complete(self) -> bool:
        if self._stage != "questions" or self._session is None:
            return False
        return self._session.has_response_for(self._session.questions[-1].id)

    def has_response(self) -> bool:
        question = self.current_question
        return bool(self._session and question and self._session.has_response_for(question.id))

    def begin_setup(self, config: Union[SessionConfig, Mapping[str, Any]]) -> Session:
        if self._stage != "setup":
            raise OrchestratorStateError(f"begin_setup not allowed in stage '{self._stage}'")
        cfg = validate_config(config)

        if self._pending is not None and self._pending[0] == cfg:
            questions = self._pending[1]
        else:
            with span("generate_questions", self.events):
                questions = self._gateway.generate_questions(cfg)
            self._pending = (cfg, questions)

        try:
            session_id = self._store.create(
                self._user_id,
                {"config": cfg, "questions": questions, "status": "in_progress"},
            )
        except SessionPersistenceError:
            logger.error("Session create failed user=%s", self._user_id)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Session create failed user=%s: %s", self._user_id, exc)
            raise SessionPersistenceError("Failed to create session") from exc

        now = utcnow()
        self._session = Session(
            id=session_id,
            user_id=self._user_id,
            config=cfg,
            questions=questions,
            status="in_progress",
            created_at=now,
            updated_at=now,
        )
        self._pending = None
        self._stage = "questions"
        self._index = 0
        self._event("session_created", stage=self._stage, questions=len(questions))
        return self._session

    def record_answer(
        self,
        transcript: str,
        duration_seconds: float,
        *,
        audio_url: Optional[str] = None,
        video_url: Optional[str] = None,
    ) -> InterviewResponse:
        """Score the current question's answer and store it, replacing any earlier one."""

        session = self._require_questions_stage("record_answer")
        question = session.questions[self._index]
        elapsed = max(0, int(round(duration_seconds)))
        with span("generate_feedback", self.events):
            feedback = self._gateway.generate_feedback(
                question,
                transcript,
                elapsed,
                session.config.job_context(),
            )
        response = InterviewResponse(
            question_id=question.id,
            transcript=transcript,
            response_time_seconds=elapsed,
            feedback=feedback,
            audio_url=audio_url,
            video_url=video_url,
        )
        responses = [item for item in session.responses if item.question_id != question.id]
        responses.append(response)
        session.responses = responses
        session.updated_at = utcnow()
        self._event("answer_recorded", question_id=question.id, index=self._index)
        return response

    def record_recording(self, answer: RecordedAnswer) -> InterviewResponse:
        session = self._require_questions_stage("record_recording")
        question = session.questions[self._index]
        if answer.question_id is not None and answer.question_id != question.id:
            raise OrchestratorStateError(
                f"Recording for question '{answer.question_id}' cannot be saved on question '{question.id}'"
            )
        return self.record_answer(
            answer.transcript,
            answer.elapsed_seconds,
            audio_url=self._upload(session.id, question.id, answer.audio),
            video_url=self._upload(session.id, question.id, answer.video),
        )

    def start_recording(self, controller: RecordingController) -> bool:
        """Start capturing an answer bound to the current question."""

        self._require_questions_stage("start_recording")
        question = self.current_question
        return controller.start(question_id=question.id if question else None)

    def submit_from(self, controller: RecordingController) -> Optional[InterviewResponse]:
        """Submit the controller's finished capture; ``None`` when it has nothing to submit.

        A capture that was started for a different question is discarded.
        """

        self._require_questions_stage("submit_from")
        question = self.current_question
        if question is None or controller.question_id != question.id:
            stale = controller.question_id
            if controller.state != "idle":
                logger.warning(
                    "Discarding recording for question=%s while on question=%s",
                    stale,
                    question.id if question else None,
                )
                controller.reset()
                self._event("recording_discarded", question_id=stale, index=self._index)
            return None
        answer = controller.submit()
        if answer is None:
            return None
        return self.record_recording(answer)

    def advance(self, delta: int, controller: Optional[RecordingController] = None) -> int:
        """Move one question back or forward; ``controller`` is reset when the index changes."""

        self._require_questions_stage("advance")
        step = (delta > 0) - (delta < 0)
        index = max(0, min(self.question_count - 1, self._index + step))
        if index != self._index and controller is not None:
            controller.reset()
        self._index = index
        return self._index

    def complete(self) -> Session:
        session = self._require_questions_stage("complete")
        last = session.questions[-1]
        if not session.has_response_for(last.id):
            raise OrchestratorStateError("The last question must be answered before completing")

        finished_at = utcnow()
        fields: Dict[str, Any] = {
            "responses": list(session.responses),
            "overall_feedback": overall_feedback(session.questions, session.responses),
            "completion_rate": completion_rate(len(session.responses), len(session.questions)),
            "status": "completed",
            "completed_at": finished_at,
        }
        try:
            self._store.update(session.id, fields)
        except SessionPersistenceError:
            logger.error("Session completion failed session=%s", session.id)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Session completion failed session=%s: %s", session.id, exc)
            raise SessionPersistenceError("Failed to complete session") from exc

        self._session = session.model_copy(update={**fields, "updated_at": finished_at})
        self._stage = "feedback"
        self._event("session_completed", status="completed", completion_rate=fields["completion_rate"])
        return self._session

    def reset(self) -> None:
        session_id = self._session.id if self._session else None
        self._stage = "setup"
        self._session = None
        self._index = 0
        self._pending = None
        self.events = []
        log_event("session_reset", session_id, stage="setup")

    def summary(self) -> ScoreSummary:
        if self._session is None:
            raise OrchestratorStateError("No session has been started")
        return summarize(self._session.questions, self._session.responses)

    def report(self) -> SessionReport:
        if self._session is None:
            raise OrchestratorStateError("No session has been started")
        return build_report(self._session)

    def _upload(self, session_id: str, question_id: str, artifact: Optional[MediaArtifact]) -> Optional[str]:
        if artifact is None or self._uploader is None:
            return None
        try:
            return self._uploader.upload(session_id, question_id, artifact)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Artifact upload failed session=%s question=%s: %s", session_id, question_id, exc)
            return None

    def _require_questions_stage(self, operation: str) -> Session:
        if self._stage != "questions" or self._session is None:
            raise OrchestratorStateError(f"{operation} not allowed in stage '{self._stage}'")
        return self._session

    def _event(self, kind: str, **fields: Any) -> None:
        session_id = self._session.id if self._session else None
        self.events.append(log_event(kind, session_id, **fields))


__all__ = ["ArtifactUploader", "CONFIG_FIELD_MESSAGES", "SessionOrchestrator", "Stage", "validate_config"]
