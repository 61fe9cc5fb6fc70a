"""Question answering over the Kotlin documentation knowledge base.

``ChatbotService.ask`` runs one request through a fixed sequence:

    validate -> retrieve -> (no context | assemble -> generate -> score)

Every exception raised along the way is caught once, here, logged with its
detail, and turned into an ``AnswerFailure`` carrying a user-safe message and
an ``ErrorKind``. Callers never see a partially filled success.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Literal, Union

from kotlin_docs_chatbot.errors import ChatbotError, ErrorKind, ValidationError
from kotlin_docs_chatbot.rag.answer_generation import AnswerGenerator
from kotlin_docs_chatbot.rag.confidence import ConfidenceLevel, score_confidence
from kotlin_docs_chatbot.rag.context import assemble_context
from kotlin_docs_chatbot.rag.retrieval import Retriever
from kotlin_docs_chatbot.utils.time import elapsed_ms

LOGGER = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 1000

EMPTY_QUESTION_MESSAGE = "Question cannot be empty"
NO_CONTEXT_MESSAGE = (
    "I couldn't find relevant information in my Kotlin knowledge base. "
    "Please ask questions related to Kotlin programming, or ensure the knowledge base is properly loaded."
)
KNOWLEDGE_BASE_MESSAGE = "There was an issue with the knowledge base. Please try again later."
GENERIC_ERROR_MESSAGE = "I encountered an error while processing your question. Please try again."


@dataclass(slots=True, frozen=True)
class AnswerSuccess:
    answer: str
    confidence: ConfidenceLevel
    context_document_count: int
    response_time_ms: int

    @property
    def successful(self) -> Literal[True]:
        return True

    def as_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "confidence": self.confidence.value,
            "contextDocumentCount": self.context_document_count,
            "responseTimeMs": self.response_time_ms,
            "successful": True,
        }


@dataclass(slots=True, frozen=True)
class AnswerFailure:
    error_message: str
    error_kind: ErrorKind = ErrorKind.GENERIC
    response_time_ms: int = 0

    @property
    def successful(self) -> Literal[False]:
        return False

    def as_dict(self) -> dict[str, Any]:
        return {"errorMessage": self.error_message, "successful": False}


AnswerResult = Union[AnswerSuccess, AnswerFailure]


def validate_question(question: str | None, *, max_length: int = MAX_QUESTION_LENGTH) -> str:
    """Return the trimmed question or raise ``ValidationError``."""
    if question is None or not question.strip():
        raise ValidationError("question", EMPTY_QUESTION_MESSAGE)
    if len(question) > max_length:
        raise ValidationError("question", f"Question must be less than {max_length} characters")
    return question.strip()


def _safe_message(exc: Exception) -> str:
    if isinstance(exc, ChatbotError) and exc.kind is ErrorKind.KNOWLEDGE_BASE:
        return KNOWLEDGE_BASE_MESSAGE
    return GENERIC_ERROR_MESSAGE


class ChatbotService:
    """Sequences retrieval, context assembly, generation and scoring for one question."""

    def __init__(
        self,
        retriever: Retriever,
        answer_generator: AnswerGenerator,
        *,
        max_question_length: int = MAX_QUESTION_LENGTH,
    ) -> None:
        self._retriever = retriever
        self._answer_generator = answer_generator
        self._max_question_length = max_question_length
        LOGGER.info(
            "ChatbotService initialized with max context documents: %s",
            retriever.config.max_context_documents,
        )

    def ask(self, question: str | None) -> AnswerResult:
        start = time.perf_counter()
        try:
            cleaned = validate_question(question, max_length=self._max_question_length)
            LOGGER.info("Processing question: %s", cleaned)

            chunks = self._retriever.retrieve(cleaned)
            LOGGER.info("Found %s relevant documents", len(chunks))
            if not chunks:
                return AnswerFailure(NO_CONTEXT_MESSAGE, ErrorKind.NO_CONTEXT, elapsed_ms(start))

            context = assemble_context(chunks)
            LOGGER.debug("Created context with %s characters", len(context))

            answer = self._answer_generator.generate(cleaned, context)
            confidence = score_confidence(len(chunks), len(answer))
        except ValidationError as exc:
            LOGGER.warning("Rejected question: %s", exc.message)
            return AnswerFailure(exc.message, ErrorKind.VALIDATION, elapsed_ms(start))
        except Exception as exc:
            elapsed = elapsed_ms(start)
            LOGGER.error("Error processing question after %sms: %s", elapsed, exc, exc_info=True)
            kind = exc.kind if isinstance(exc, ChatbotError) else ErrorKind.GENERIC
            return AnswerFailure(_safe_message(exc), kind, elapsed)

        elapsed = elapsed_ms(start)
        LOGGER.info(
            "Generated response in %sms with %s context documents, confidence: %s",
            elapsed,
            len(chunks),
            confidence.value,
        )
        return AnswerSuccess(
            answer=answer,
            confidence=confidence,
            context_document_count=len(chunks),
            response_time_ms=elapsed,
        )
