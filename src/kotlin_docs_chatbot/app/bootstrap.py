"""Runtime bootstrap helpers for the CLI and HTTP front-ends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from langchain_core.embeddings import Embeddings

from kotlin_docs_chatbot.chatbot import ChatbotService
from kotlin_docs_chatbot.config import ChatbotConfig
from kotlin_docs_chatbot.llm import LangChainLLMAdapter
from kotlin_docs_chatbot.rag import (
    AnswerGenerator,
    DocumentIngestionPipeline,
    DocumentResource,
    EmbeddingFactory,
    ProcessingResult,
    Retriever,
    VectorStoreManager,
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RuntimeComponents:
    """Bundled runtime components for reuse across entry points."""

    config: ChatbotConfig
    vector_store: VectorStoreManager
    ingestion: DocumentIngestionPipeline
    retriever: Retriever
    answer_generator: AnswerGenerator
    chatbot: ChatbotService


def build_runtime_components(
    config: ChatbotConfig,
    *,
    embeddings: Embeddings | None = None,
    llm_client: Any | None = None,
) -> RuntimeComponents:
    embeddings = embeddings or EmbeddingFactory(config.embedding_settings()).build()
    vector_store = VectorStoreManager(embeddings, config.vector_store_config())
    ingestion = DocumentIngestionPipeline(vector_store, config.ingestion_config())
    retriever = Retriever(vector_store, config.retrieval_config())
    answer_generator = AnswerGenerator(
        llm_client or LangChainLLMAdapter(config.llm_settings()),
        template=config.prompt_template(),
    )
    chatbot = ChatbotService(retriever, answer_generator, max_question_length=config.max_question_length())
    return RuntimeComponents(
        config=config,
        vector_store=vector_store,
        ingestion=ingestion,
        retriever=retriever,
        answer_generator=answer_generator,
        chatbot=chatbot,
    )


def load_runtime_from_path(config_path: Path) -> RuntimeComponents:
    """Load configuration and bootstrap all runtime services."""
    return build_runtime_components(ChatbotConfig.from_file(config_path))


def reload_default_document(runtime: RuntimeComponents) -> ProcessingResult | None:
    """Ingest the configured default document once; ``None`` when the file is absent."""
    path = runtime.config.initialization_config().default_document_path
    resource = DocumentResource(path)
    LOGGER.info("Attempting to load default Kotlin documentation from: %s", path)
    if not resource.exists():
        LOGGER.warning(
            "Default Kotlin document not found at: %s. Ingest a Kotlin documentation file manually.",
            path,
        )
        return None

    result = runtime.ingestion.ingest(resource)
    if result.successful:
        LOGGER.info(
            "Loaded default Kotlin documentation. Documents: %s, Chunks: %s, Time: %sms",
            result.documents_processed,
            result.chunks_created,
            result.processing_time_ms,
        )
    else:
        LOGGER.error("Failed to process default Kotlin documentation: %s", result.error_message)
    return result


def load_default_document(runtime: RuntimeComponents) -> ProcessingResult | None:
    """Startup hook: ingest the default document when auto-loading is enabled."""
    if not runtime.config.initialization_config().auto_load_default_document:
        LOGGER.info("Auto-loading of the default document is disabled. Use `kotlin-chatbot ingest` to add documents.")
        LOGGER.info("To enable auto-loading, set initialization.auto_load_default_document: true")
        return None
    try:
        return reload_default_document(runtime)
    except Exception:
        LOGGER.exception("Error loading default Kotlin documentation")
        return None
