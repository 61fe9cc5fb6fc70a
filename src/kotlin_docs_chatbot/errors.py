"""Error taxonomy shared by the ingestion and query pipelines."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to failure results so callers can pick a status."""

    VALIDATION = "validation"
    NO_CONTEXT = "no_context"
    KNOWLEDGE_BASE = "knowledge_base"
    DOCUMENT = "document"
    GENERATION = "generation"
    GENERIC = "generic"


class ChatbotError(Exception):
    """Base class for errors raised by chatbot components."""

    kind: ErrorKind = ErrorKind.GENERIC


class ValidationError(ChatbotError):
    """Raised when user input is rejected before any external call is made."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class KnowledgeBaseError(ChatbotError):
    """Raised when the vector store is unreachable or misconfigured."""

    kind = ErrorKind.KNOWLEDGE_BASE


class DocumentReadError(ChatbotError):
    """Raised when a source document is missing or cannot be parsed."""

    kind = ErrorKind.DOCUMENT


class GenerationError(ChatbotError):
    """Raised when the LLM generation fails."""

    kind = ErrorKind.GENERATION
