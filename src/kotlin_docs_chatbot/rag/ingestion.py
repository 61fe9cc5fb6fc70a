"""Document ingestion pipeline for the Kotlin documentation chatbot.

A source document is read page by page, split into overlapping token-bounded
chunks, annotated with provenance metadata and written to the vector store in
fixed-size batches. Batches are written sequentially and in order; a failure
part-way through leaves earlier batches in the store.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Protocol, Union

from langchain_core.documents import Document

from kotlin_docs_chatbot.rag.chunking import ChunkingConfig, TokenChunker
from kotlin_docs_chatbot.rag.documents import DocumentResource
from kotlin_docs_chatbot.rag.metadata import MetadataEnricher
from kotlin_docs_chatbot.utils.time import elapsed_ms

LOGGER = logging.getLogger(__name__)


class ChunkSink(Protocol):
    def add_documents(self, documents: Sequence[Document]) -> list[str]: ...


@dataclass(slots=True, frozen=True)
class IngestionConfig:
    """Configuration settings for the document ingestion pipeline."""

    chunk_size: int = 800
    chunk_overlap: int = 100
    min_chunk_tokens: int = 5
    max_chunk_tokens: int = 10000
    encoding_name: str = "cl100k_base"
    batch_size: int = 50
    content_type: str = "kotlin_documentation"
    language: str = "kotlin"

    def chunking_config(self) -> ChunkingConfig:
        return ChunkingConfig(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            min_chunk_tokens=self.min_chunk_tokens,
            max_chunk_tokens=self.max_chunk_tokens,
            encoding_name=self.encoding_name,
        )


@dataclass(slots=True, frozen=True)
class ProcessingSuccess:
    documents_processed: int
    chunks_created: int
    processing_time_ms: int

    @property
    def successful(self) -> Literal[True]:
        return True

    def as_dict(self) -> dict[str, Any]:
        return {
            "documentsProcessed": self.documents_processed,
            "chunksCreated": self.chunks_created,
            "processingTimeMs": self.processing_time_ms,
            "successful": True,
        }


@dataclass(slots=True, frozen=True)
class ProcessingFailure:
    processing_time_ms: int
    error_message: str

    @property
    def successful(self) -> Literal[False]:
        return False

    def as_dict(self) -> dict[str, Any]:
        return {
            "processingTimeMs": self.processing_time_ms,
            "errorMessage": self.error_message,
            "successful": False,
        }


ProcessingResult = Union[ProcessingSuccess, ProcessingFailure]


def partition(chunks: Sequence[Document], batch_size: int) -> list[list[Document]]:
    """Split ``chunks`` into consecutive batches of at most ``batch_size``."""
    if batch_size <= 0:
        message = f"batch_size must be positive, got {batch_size}"
        raise ValueError(message)
    return [list(chunks[start : start + batch_size]) for start in range(0, len(chunks), batch_size)]


class DocumentIngestionPipeline:
    """Reads, chunks, enriches and stores a single document per call."""

    def __init__(
        self,
        vector_store: ChunkSink,
        config: IngestionConfig | None = None,
        *,
        chunker: TokenChunker | None = None,
        enricher: MetadataEnricher | None = None,
    ) -> None:
        self._vector_store = vector_store
        self._config = config or IngestionConfig()
        if self._config.batch_size <= 0:
            message = f"batch_size must be positive, got {self._config.batch_size}"
            raise ValueError(message)
        self._chunker = chunker or TokenChunker(self._config.chunking_config())
        self._enricher = enricher or MetadataEnricher(
            content_type=self._config.content_type,
            language=self._config.language,
        )
        LOGGER.debug(
            "Initialized DocumentIngestionPipeline(chunk_size=%s, chunk_overlap=%s, batch_size=%s)",
            self._config.chunk_size,
            self._config.chunk_overlap,
            self._config.batch_size,
        )

    @property
    def config(self) -> IngestionConfig:
        """Return the configuration currently in use."""
        return self._config

    def ingest_path(self, path: Path) -> ProcessingResult:
        return self.ingest(DocumentResource(path))

    def ingest(self, resource: DocumentResource) -> ProcessingResult:
        start = time.perf_counter()
        try:
            LOGGER.info("Starting document processing for resource: %s", resource.name)
            pages = resource.pages()
            LOGGER.info("Read %s pages from %s", len(pages), resource.name)

            chunks = self._chunker.split_documents(pages)
            LOGGER.info("Created %s chunks from %s", len(chunks), resource.name)

            self._enricher.enrich(chunks, resource.name)
            stored = self._write_batches(chunks)
        except Exception as exc:
            elapsed = elapsed_ms(start)
            LOGGER.error("Error processing document %s: %s", resource.name, exc, exc_info=True)
            return ProcessingFailure(processing_time_ms=elapsed, error_message=str(exc) or "Unknown error")

        elapsed = elapsed_ms(start)
        LOGGER.info(
            "Successfully processed %s. Total chunks: %s, processing time: %sms",
            resource.name,
            stored,
            elapsed,
        )
        return ProcessingSuccess(documents_processed=len(pages), chunks_created=stored, processing_time_ms=elapsed)

    def _write_batches(self, chunks: Sequence[Document]) -> int:
        total = len(chunks)
        stored = 0
        for batch in partition(chunks, self._config.batch_size):
            LOGGER.info("Processing batch %s-%s of %s chunks", stored + 1, stored + len(batch), total)
            self._vector_store.add_documents(batch)
            stored += len(batch)
            LOGGER.debug("Processed %s chunks so far", stored)
        return stored
