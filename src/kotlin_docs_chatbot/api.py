"""FastAPI application exposing the chatbot over HTTP.

Route map (prefix configurable, default ``/api/kotlin-chatbot``):

    POST /ask                question in a JSON body
    GET  /ask?question=...   same semantics via query parameter
    GET  /info               static descriptor
    POST /documents/reload   re-ingest the configured default document

Route handlers are plain ``def`` functions, so FastAPI runs the blocking
pipeline calls in its threadpool. Services are resolved from ``app.state``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from kotlin_docs_chatbot import __version__
from kotlin_docs_chatbot.app.bootstrap import (
    RuntimeComponents,
    load_default_document,
    load_runtime_from_path,
    reload_default_document,
)
from kotlin_docs_chatbot.chatbot import AnswerResult, ChatbotService, validate_question
from kotlin_docs_chatbot.config import DEFAULT_CONFIG_PATH
from kotlin_docs_chatbot.errors import DocumentReadError, ErrorKind, KnowledgeBaseError, ValidationError
from kotlin_docs_chatbot.logging_setup import configure_logging

LOGGER = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NO_CONTEXT: 400,
    ErrorKind.DOCUMENT: 422,
    ErrorKind.KNOWLEDGE_BASE: 503,
    ErrorKind.GENERATION: 500,
    ErrorKind.GENERIC: 500,
}


class ChatRequest(BaseModel):
    question: str


class ChatbotInfo(BaseModel):
    name: str
    version: str
    description: str
    usage: str


CHATBOT_INFO = ChatbotInfo(
    name="Kotlin Expert Chatbot",
    version=__version__,
    description=(
        "A specialized AI chatbot for answering Kotlin programming questions "
        "using RAG (Retrieval-Augmented Generation)"
    ),
    usage="Ask me anything about Kotlin programming - syntax, concepts, best practices, and more!",
)


def _error_body(message: str) -> dict[str, object]:
    return {"errorMessage": message, "successful": False}


def _answer_response(result: AnswerResult) -> JSONResponse:
    if result.successful:
        return JSONResponse(status_code=200, content=result.as_dict())
    return JSONResponse(status_code=_STATUS_BY_KIND[result.error_kind], content=result.as_dict())


def _get_runtime(request: Request) -> RuntimeComponents:
    return request.app.state.runtime


def _get_chatbot(request: Request) -> ChatbotService:
    return request.app.state.runtime.chatbot


RuntimeDep = Annotated[RuntimeComponents, Depends(_get_runtime)]
ChatbotDep = Annotated[ChatbotService, Depends(_get_chatbot)]


def build_router(max_question_length: int) -> APIRouter:
    router = APIRouter()

    @router.post("/ask")
    def ask_question(payload: ChatRequest, chatbot: ChatbotDep) -> JSONResponse:
        LOGGER.info("Received question: %s", payload.question)
        question = validate_question(payload.question, max_length=max_question_length)
        return _answer_response(chatbot.ask(question))

    @router.get("/ask")
    def ask_question_get(chatbot: ChatbotDep, question: Annotated[str, Query()] = "") -> JSONResponse:
        LOGGER.info("Received GET question: %s", question)
        try:
            cleaned = validate_question(question, max_length=max_question_length)
        except ValidationError as exc:
            # Query-string callers get the bare message, not the field map.
            return JSONResponse(status_code=400, content=_error_body(exc.message))
        return _answer_response(chatbot.ask(cleaned))

    @router.get("/info")
    def chatbot_info() -> ChatbotInfo:
        return CHATBOT_INFO

    @router.post("/documents/reload")
    def reload_documents(runtime: RuntimeDep) -> JSONResponse:
        LOGGER.info("Manually reloading default Kotlin documentation...")
        result = reload_default_document(runtime)
        if result is None:
            return JSONResponse(status_code=404, content=_error_body("Default document not found"))
        return JSONResponse(status_code=200 if result.successful else 422, content=result.as_dict())

    return router


def _register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(ValidationError)
    async def handle_validation(_: Request, exc: ValidationError) -> JSONResponse:
        errors = {exc.field: exc.message}
        message = f"Validation failed: {errors}"
        LOGGER.warning("Validation error: %s", message)
        return JSONResponse(status_code=400, content=_error_body(message))

    @application.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = {str(error["loc"][-1]): error.get("msg", "Invalid value") for error in exc.errors()}
        message = f"Validation failed: {errors}"
        LOGGER.warning("Validation error: %s", message)
        return JSONResponse(status_code=400, content=_error_body(message))

    @application.exception_handler(KnowledgeBaseError)
    async def handle_knowledge_base(_: Request, exc: KnowledgeBaseError) -> JSONResponse:
        LOGGER.error("Vector store error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=503,
            content=_error_body("There was an issue with the knowledge base. Please try again later."),
        )

    @application.exception_handler(DocumentReadError)
    async def handle_document(_: Request, exc: DocumentReadError) -> JSONResponse:
        LOGGER.error("Document processing error: %s", exc, exc_info=exc)
        return JSONResponse(status_code=422, content=_error_body(f"Error processing document: {exc}"))

    @application.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        LOGGER.error("Unexpected error occurred", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body("An unexpected error occurred. Please try again later."),
        )


def create_app(runtime: RuntimeComponents | None = None, *, config_path: Path = DEFAULT_CONFIG_PATH) -> FastAPI:
    """Build the FastAPI application around ``runtime`` (loaded from ``config_path`` if omitted)."""
    runtime = runtime or load_runtime_from_path(config_path)
    configure_logging(runtime.config.logging_level())
    server = runtime.config.server_config()

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        load_default_document(application.state.runtime)
        yield

    application = FastAPI(
        title="Kotlin Expert Chatbot",
        version=__version__,
        description=CHATBOT_INFO.description,
        lifespan=lifespan,
    )
    application.state.runtime = runtime
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(server.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(application)
    application.include_router(build_router(runtime.config.max_question_length()), prefix=server.api_prefix)
    return application
