"""Question and feedback generation with local fallback."""
from .fallback import fallback_feedback, fallback_questions
from .gateway import DEFAULT_QUESTION_COUNT, GenerationGateway
from .validation import validate_feedback, validate_questions

__all__ = [
    "DEFAULT_QUESTION_COUNT",
    "GenerationGateway",
    "fallback_feedback",
    "fallback_questions",
    "validate_feedback",
    "validate_questions",
]
