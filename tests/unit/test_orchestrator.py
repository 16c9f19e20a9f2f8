import random

import pytest

from config import ServiceAvailability, resolve_routes
from config.settings import Settings
from generation import GenerationGateway
from interview_session.errors import ConfigValidationError, OrchestratorStateError, SessionPersistenceError
from recording import MediaArtifact, RecordedAnswer, RecordingController
from services.orchestrator import SessionOrchestrator
from storage import InMemorySessionStore

from conftest import FakeCapture, FakeTranscription, ManualTicker

CONFIG = {
    "job_title": "Backend Engineer",
    "company": "Acme",
    "job_description": "Build APIs",
    "resume_text": "Python, Go",
}


class CountingGateway(GenerationGateway):
    def __init__(self) -> None:
        super().__init__(
            ServiceAvailability.offline(),
            resolve_routes(Settings(_env_file=None)),
            rng=random.Random(5),
            id_factory=lambda i: f"q{i + 1}",
        )
        self.question_calls = 0

    def generate_questions(self, config):
        self.question_calls += 1
        return super().generate_questions(config)


class FlakyStore(InMemorySessionStore):
    def __init__(self, fail_create: int = 0, fail_update: int = 0) -> None:
        super().__init__()
        self.fail_create = fail_create
        self.fail_update = fail_update

    def create(self, user_id, initial_fields):
        if self.fail_create:
            self.fail_create -= 1
            raise SessionPersistenceError("database offline")
        return super().create(user_id, initial_fields)

    def update(self, session_id, partial_fields):
        if self.fail_update:
            self.fail_update -= 1
            raise OSError("disk full")
        super().update(session_id, partial_fields)


def _orchestrator(store=None, gateway=None):
    return SessionOrchestrator(gateway or CountingGateway(), store or InMemorySessionStore(), "user-1")


def test_setup_rejects_blank_fields_before_generation():
    gateway = CountingGateway()
    orchestrator = _orchestrator(gateway=gateway)

    with pytest.raises(ConfigValidationError) as info:
        orchestrator.begin_setup({**CONFIG, "company": "  ", "resume_text": None})

    assert info.value.errors == {
        "company": "Please enter a company name",
        "resume_text": "Please provide your resume content",
    }
    assert gateway.question_calls == 0
    assert orchestrator.stage == "setup"


def test_full_practice_run():
    store = InMemorySessionStore()
    orchestrator = _orchestrator(store)
    session = orchestrator.begin_setup(CONFIG)

    assert orchestrator.stage == "questions"
    assert orchestrator.current_index == 0
    assert session.status == "in_progress"
    assert len(session.questions) == 5
    assert store.get(session.id).status == "in_progress"

    for index in range(5):
        orchestrator.record_answer("I like building reliable backend systems daily", 45)
        assert orchestrator.current_index == index
        assert orchestrator.has_response()
        orchestrator.advance(1)

    assert orchestrator.is_last_question
    assert orchestrator.can_complete
    completed = orchestrator.complete()

    assert orchestrator.stage == "feedback"
    assert completed.status == "completed"
    assert completed.completion_rate == 100
    assert completed.completed_at is not None
    assert completed.overall_feedback.startswith("Interview completed with 5 out of 5 questions answered.")
    stored = store.get(session.id)
    assert stored.status == "completed"
    assert len(stored.responses) == 5
    assert all(r.feedback.content_score == 4 and r.feedback.confidence_score == 7 for r in stored.responses)

    kinds = [event.get("kind") for event in orchestrator.events if "kind" in event]
    assert kinds[0] == "session_created"
    assert kinds[-1] == "session_completed"


def test_answers_out_of_order_and_resubmission():
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)

    for _ in range(4):
        orchestrator.advance(1)
    orchestrator.record_answer("last question answer", 30)
    orchestrator.advance(-1)
    orchestrator.advance(-1)
    orchestrator.record_answer("third question answer", 20)
    orchestrator.record_answer("third question, second try", 25)

    session = orchestrator.session
    assert [r.question_id for r in session.responses] == ["q5", "q3"]
    assert session.response_for("q3").transcript == "third question, second try"
    assert session.response_for("q3").response_time_seconds == 25

    for _ in range(2):
        orchestrator.advance(1)
    completed = orchestrator.complete()
    assert completed.completion_rate == 40
    assert "2 out of 5" in completed.overall_feedback


def test_advance_is_clamped_and_sign_only():
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)

    assert orchestrator.advance(-1) == 0
    assert orchestrator.can_go_previous is False
    assert orchestrator.advance(3) == 1
    for _ in range(10):
        orchestrator.advance(1)
    assert orchestrator.current_index == 4
    assert orchestrator.can_go_next is False


def test_complete_requires_last_answer():
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)
    orchestrator.record_answer("first", 10)

    with pytest.raises(OrchestratorStateError):
        orchestrator.complete()
    assert orchestrator.stage == "questions"


def test_operations_outside_question_stage():
    orchestrator = _orchestrator()
    with pytest.raises(OrchestratorStateError):
        orchestrator.record_answer("x", 1)
    with pytest.raises(OrchestratorStateError):
        orchestrator.advance(1)
    with pytest.raises(OrchestratorStateError):
        orchestrator.summary()


def test_create_failure_keeps_setup_and_reuses_questions():
    gateway = CountingGateway()
    store = FlakyStore(fail_create=1)
    orchestrator = _orchestrator(store, gateway)

    with pytest.raises(SessionPersistenceError):
        orchestrator.begin_setup(CONFIG)
    assert orchestrator.stage == "setup"
    assert orchestrator.session is None

    session = orchestrator.begin_setup(CONFIG)
    assert gateway.question_calls == 1
    assert orchestrator.stage == "questions"
    assert store.get(session.id) is not None


def test_complete_failure_preserves_state_for_retry():
    store = FlakyStore(fail_update=1)
    orchestrator = _orchestrator(store)
    orchestrator.begin_setup(CONFIG)
    for _ in range(4):
        orchestrator.advance(1)
    orchestrator.record_answer("final answer", 40)

    with pytest.raises(SessionPersistenceError):
        orchestrator.complete()
    assert orchestrator.stage == "questions"
    assert orchestrator.session.status == "in_progress"
    assert len(orchestrator.session.responses) == 1

    completed = orchestrator.complete()
    assert completed.status == "completed"
    assert orchestrator.stage == "feedback"


def test_submit_from_recording_controller():
    transcription = FakeTranscription()
    ticker = ManualTicker()
    controller = RecordingController(FakeCapture(), transcription, ticker_factory=lambda: ticker)
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)

    assert orchestrator.submit_from(controller) is None

    assert orchestrator.start_recording(controller) is True
    assert controller.question_id == "q1"
    transcription.emit("Spoken answer about APIs")
    ticker.tick(35)
    controller.stop()
    response = orchestrator.submit_from(controller)

    assert response.question_id == "q1"
    assert response.response_time_seconds == 35
    assert response.transcript == "Spoken answer about APIs"
    assert controller.state == "idle"


def test_reset_returns_to_setup():
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)
    orchestrator.reset()

    assert orchestrator.stage == "setup"
    assert orchestrator.session is None
    assert orchestrator.current_question is None


def test_summary_and_report_follow_responses():
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)
    assert orchestrator.summary().overall_score is None

    orchestrator.record_answer("some words here", 12)
    summary = orchestrator.summary()
    assert summary.answered_questions == 1
    assert summary.completion_rate == 20

    report = orchestrator.report()
    assert report.session_id == orchestrator.session.id
    assert report.summary == summary


def _recorder():
    transcription = FakeTranscription()
    ticker = ManualTicker()
    capture = FakeCapture()
    controller = RecordingController(capture, transcription, ticker_factory=lambda: ticker)
    return controller, transcription, ticker, capture


def test_capture_is_not_credited_to_another_question():
    controller, transcription, ticker, _ = _recorder()
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)

    orchestrator.start_recording(controller)
    transcription.emit("answer to question one")
    ticker.tick(20)
    controller.stop()
    orchestrator.advance(1)

    assert orchestrator.submit_from(controller) is None
    assert orchestrator.session.responses == []
    assert controller.state == "idle"
    assert any(event.get("kind") == "recording_discarded" for event in orchestrator.events)

    orchestrator.advance(-1)
    assert orchestrator.submit_from(controller) is None
    assert orchestrator.session.responses == []


def test_advance_with_controller_releases_device():
    controller, transcription, _, capture = _recorder()
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)

    orchestrator.start_recording(controller)
    transcription.emit("half an answer")
    orchestrator.advance(1, controller)

    assert controller.state == "idle"
    assert controller.holds_device is False
    assert capture.device.released is True
    assert controller.transcript == ""


def test_advance_at_boundary_keeps_capture():
    controller, _, _, _ = _recorder()
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)

    orchestrator.start_recording(controller)
    orchestrator.advance(-1, controller)

    assert controller.state == "recording"
    assert controller.question_id == "q1"


def test_recording_for_other_question_is_rejected():
    orchestrator = _orchestrator()
    orchestrator.begin_setup(CONFIG)
    answer = RecordedAnswer(question_id="q2", transcript="meant for q2", elapsed_seconds=10)

    with pytest.raises(OrchestratorStateError):
        orchestrator.record_recording(answer)
    assert orchestrator.session.responses == []


class RecordingUploader:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads = []

    def upload(self, session_id, question_id, artifact):
        if self.fail:
            raise OSError("bucket unavailable")
        self.uploads.append((session_id, question_id, artifact.mime_type))
        return f"https://media.test/{session_id}/{question_id}/{artifact.mime_type.split('/')[0]}"


def test_recording_artifacts_are_uploaded_to_response_urls():
    controller, transcription, ticker, _ = _recorder()
    uploader = RecordingUploader()
    orchestrator = SessionOrchestrator(CountingGateway(), InMemorySessionStore(), "user-1", uploader=uploader)
    session = orchestrator.begin_setup(CONFIG)

    orchestrator.start_recording(controller)
    transcription.emit("An answer with media")
    ticker.tick(15)
    controller.stop()
    response = orchestrator.submit_from(controller)

    assert response.audio_url == f"https://media.test/{session.id}/q1/audio"
    assert response.video_url == f"https://media.test/{session.id}/q1/video"
    assert [item[2] for item in uploader.uploads] == ["audio/webm", "video/webm"]


def test_upload_failure_keeps_answer_without_urls():
    orchestrator = SessionOrchestrator(
        CountingGateway(), InMemorySessionStore(), "user-1", uploader=RecordingUploader(fail=True)
    )
    orchestrator.begin_setup(CONFIG)
    answer = RecordedAnswer(
        question_id="q1",
        transcript="Answer",
        elapsed_seconds=5,
        audio=MediaArtifact(content=b"a", mime_type="audio/webm"),
    )

    response = orchestrator.record_recording(answer)
    assert response.audio_url is None
    assert orchestrator.session.has_response_for("q1")
