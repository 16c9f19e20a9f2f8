"""Single entry point for question and feedback generation.

Each operation makes at most one call to the reasoning service. Any failure
on that path (transport, timeout, status, malformed payload) is logged and
absorbed by the deterministic generators, so callers always receive
validated domain models.
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Dict, List, Optional

from config import LlmRoute, RouteName, ServiceAvailability, Settings, load_config, resolve_routes
from interview_session.models import InterviewQuestion, JobContext, ResponseFeedback, SessionConfig
from llm_gateway import HttpClient, LlmGatewayError, call
from observability import log_event, span

from .fallback import fallback_feedback, fallback_questions
from .prompts import FEEDBACK_SYSTEM_PROMPT, feedback_task, questions_system_prompt, questions_task
from .validation import FeedbackPayload, IdFactory, QuestionBatch, validate_feedback, validate_questions

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_COUNT = 5


class GenerationGateway:
    def __init__(
        self,
        availability: ServiceAvailability,
        routes: Dict[RouteName, LlmRoute],
        *,
        client: Optional[HttpClient] = None,
        rng: Optional[random.Random] = None,
        question_count: int = DEFAULT_QUESTION_COUNT,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        if question_count < 1:
            raise ValueError("question_count must be positive")
        self._availability = availability
        self._routes = routes
        self._client = client
        self._rng = rng or random.Random()
        self._id_factory = id_factory
        self.question_count = question_count

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        availability: ServiceAvailability,
        *,
        client: Optional[HttpClient] = None,
        rng: Optional[random.Random] = None,
    ) -> "GenerationGateway":
        overrides = load_config(Path(cfg.LLM_ROUTES_PATH)) if cfg.LLM_ROUTES_PATH else None
        return cls(
            availability,
            resolve_routes(cfg, overrides),
            client=client,
            rng=rng,
            question_count=cfg.QUESTION_COUNT,
        )

    def generate_questions(self, config: SessionConfig) -> List[InterviewQuestion]:
        count = self.question_count
        if self._availability.reasoning:
            try:
                with span("generate_questions") as timing:
                    batch = call(
                        questions_task(config, count),
                        QuestionBatch,
                        cfg=self._routes["questions"],
                        system_prompt=questions_system_prompt(count),
                        client=self._client,
                    )
                    questions = validate_questions(batch.questions, count, id_factory=self._id_factory)
                logger.info("Questions generated source=reasoning count=%d ms=%s", count, timing["ms"])
                return questions
            except (LlmGatewayError, ValueError, TypeError) as exc:
                logger.warning("Question generation falling back: %s", exc)
                log_event("generation_fallback", None, stage="questions", reason=type(exc).__name__)
        else:
            logger.info("Reasoning service not configured; using template questions")
        return fallback_questions(config, count, id_factory=self._id_factory)

    def generate_feedback(
        self,
        question: InterviewQuestion,
        transcript: str,
        duration_seconds: float,
        job_context: JobContext,
    ) -> ResponseFeedback:
        if self._availability.reasoning:
            try:
                with span("generate_feedback") as timing:
                    payload = call(
                        feedback_task(question, transcript, duration_seconds, job_context),
                        FeedbackPayload,
                        cfg=self._routes["feedback"],
                        system_prompt=FEEDBACK_SYSTEM_PROMPT,
                        client=self._client,
                    )
                    feedback = validate_feedback(payload)
                logger.info("Feedback generated source=reasoning question=%s ms=%s", question.id, timing["ms"])
                return feedback
            except (LlmGatewayError, ValueError, TypeError) as exc:
                logger.warning("Feedback generation falling back question=%s: %s", question.id, exc)
                log_event("generation_fallback", None, stage="feedback", question_id=question.id, reason=type(exc).__name__)
        return fallback_feedback(transcript, duration_seconds, rng=self._rng)


__all__ = ["DEFAULT_QUESTION_COUNT", "GenerationGateway"]
