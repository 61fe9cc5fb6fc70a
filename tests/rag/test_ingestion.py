from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from langchain_core.documents import Document

from kotlin_docs_chatbot.errors import DocumentReadError, KnowledgeBaseError
from kotlin_docs_chatbot.rag import (
    ChunkingConfig,
    DocumentIngestionPipeline,
    IngestionConfig,
    ProcessingFailure,
    ProcessingSuccess,
    TokenChunker,
)
from kotlin_docs_chatbot.rag.ingestion import partition


def count_words(text: str) -> int:
    return len(text.split())


def words(count: int, prefix: str = "w") -> str:
    return " ".join(f"{prefix}{index}" for index in range(count))


class RecordingSink:
    def __init__(self, fail_on_call: int | None = None) -> None:
        self.batches: list[list[Document]] = []
        self.fail_on_call = fail_on_call

    def add_documents(self, documents: Sequence[Document]) -> list[str]:
        if self.fail_on_call is not None and len(self.batches) + 1 == self.fail_on_call:
            message = "Failed to write to collection 'kotlin_docs'"
            raise KnowledgeBaseError(message)
        self.batches.append(list(documents))
        return [f"id-{index}" for index in range(len(documents))]


@dataclass
class StaticResource:
    name: str
    texts: list[str] = field(default_factory=list)

    def exists(self) -> bool:
        return True

    def pages(self) -> list[Document]:
        return [
            Document(page_content=text, metadata={"page_number": number})
            for number, text in enumerate(self.texts, start=1)
        ]


def build_pipeline(sink: RecordingSink, **overrides: int) -> DocumentIngestionPipeline:
    config = IngestionConfig(**overrides)
    chunker = TokenChunker(config.chunking_config(), token_counter=count_words)
    return DocumentIngestionPipeline(sink, config, chunker=chunker)


def test_three_page_document_is_chunked_and_stored_in_one_batch() -> None:
    sink = RecordingSink()
    pipeline = build_pipeline(sink)
    resource = StaticResource("kotlin-docs.pdf", [words(2500, prefix=f"p{page}w") for page in range(3)])

    result = pipeline.ingest(resource)

    assert isinstance(result, ProcessingSuccess)
    assert result.successful
    assert result.documents_processed == 3
    assert result.chunks_created == 12
    assert result.processing_time_ms >= 0
    assert len(sink.batches) == 1
    stored = sink.batches[0]
    assert [chunk.metadata["chunk_index"] for chunk in stored] == list(range(12))
    assert all(chunk.metadata["source"] == "kotlin-docs.pdf" for chunk in stored)
    assert [chunk.metadata["page_number"] for chunk in stored] == [1] * 4 + [2] * 4 + [3] * 4


def test_chunks_are_written_in_consecutive_batches() -> None:
    sink = RecordingSink()
    pipeline = build_pipeline(sink, chunk_size=10, chunk_overlap=0, batch_size=4)
    resource = StaticResource("guide.md", [words(100)])

    result = pipeline.ingest(resource)

    assert result.successful
    assert result.chunks_created == 10
    assert [len(batch) for batch in sink.batches] == [4, 4, 2]
    indices = [chunk.metadata["chunk_index"] for batch in sink.batches for chunk in batch]
    assert indices == list(range(10))


def test_store_failure_returns_failure_and_keeps_earlier_batches() -> None:
    sink = RecordingSink(fail_on_call=2)
    pipeline = build_pipeline(sink, chunk_size=10, chunk_overlap=0, batch_size=4)

    result = pipeline.ingest(StaticResource("guide.md", [words(100)]))

    assert isinstance(result, ProcessingFailure)
    assert not result.successful
    assert "Failed to write" in result.error_message
    assert len(sink.batches) == 1


def test_missing_file_returns_failure(tmp_path: Path) -> None:
    sink = RecordingSink()
    pipeline = build_pipeline(sink)

    result = pipeline.ingest_path(tmp_path / "absent.pdf")

    assert isinstance(result, ProcessingFailure)
    assert "not found" in result.error_message
    assert sink.batches == []


def test_unreadable_resource_is_reported_not_raised() -> None:
    class BrokenResource(StaticResource):
        def pages(self) -> list[Document]:
            message = "Unable to read broken.pdf: bad xref"
            raise DocumentReadError(message)

    result = build_pipeline(RecordingSink()).ingest(BrokenResource("broken.pdf"))

    assert result.as_dict() == {
        "processingTimeMs": result.processing_time_ms,
        "errorMessage": "Unable to read broken.pdf: bad xref",
        "successful": False,
    }


def test_ingest_path_reads_text_files(tmp_path: Path) -> None:
    source = tmp_path / "null-safety.txt"
    source.write_text(words(30), encoding="utf-8")
    sink = RecordingSink()

    result = build_pipeline(sink, chunk_size=20, chunk_overlap=5).ingest_path(source)

    assert result.successful
    assert result.documents_processed == 1
    assert result.chunks_created == 2
    assert sink.batches[0][0].metadata["source"] == "null-safety.txt"


def test_success_as_dict_uses_wire_names() -> None:
    result = ProcessingSuccess(documents_processed=3, chunks_created=12, processing_time_ms=40)

    assert result.as_dict() == {
        "documentsProcessed": 3,
        "chunksCreated": 12,
        "processingTimeMs": 40,
        "successful": True,
    }


def test_partition_rejects_non_positive_batch_size() -> None:
    with pytest.raises(ValueError):
        partition([], 0)


def test_pipeline_rejects_non_positive_batch_size() -> None:
    with pytest.raises(ValueError):
        DocumentIngestionPipeline(
            RecordingSink(),
            IngestionConfig(batch_size=0),
            chunker=TokenChunker(ChunkingConfig(), token_counter=count_words),
        )


def test_reingesting_appends_chunks() -> None:
    sink = RecordingSink()
    pipeline = build_pipeline(sink, chunk_size=20, chunk_overlap=5)
    resource = StaticResource("guide.md", [words(30)])

    pipeline.ingest(resource)
    pipeline.ingest(resource)

    stored = [chunk for batch in sink.batches for chunk in batch]
    assert len(stored) == 4
    assert [chunk.metadata["chunk_index"] for chunk in stored] == [0, 1, 0, 1]
