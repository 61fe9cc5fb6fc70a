"""Similarity retrieval against the knowledge base."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from langchain_core.documents import Document

LOGGER = logging.getLogger(__name__)


class SimilaritySearcher(Protocol):
    def similarity_search(self, query: str, top_k: int, threshold: float) -> list[tuple[Document, float]]: ...


@dataclass(slots=True, frozen=True)
class RetrievalConfig:
    """Customizable retrieval parameters."""

    max_context_documents: int = 5
    similarity_threshold: float = 0.7


@dataclass(slots=True)
class RetrievedChunk:
    """A stored chunk together with its relevance score."""

    document: Document
    score: float

    @property
    def text(self) -> str:
        return self.document.page_content


class Retriever:
    """Runs top-K similarity search and keeps only chunks above the threshold.

    Store failures surface as ``KnowledgeBaseError`` from the vector store
    manager; an empty result is not an error.
    """

    def __init__(self, vector_store: SimilaritySearcher, config: RetrievalConfig | None = None) -> None:
        self._vector_store = vector_store
        self._config = config or RetrievalConfig()

    @property
    def config(self) -> RetrievalConfig:
        return self._config

    def retrieve(
        self,
        question: str,
        *,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
    ) -> list[RetrievedChunk]:
        k = top_k if top_k is not None else self._config.max_context_documents
        threshold = similarity_threshold if similarity_threshold is not None else self._config.similarity_threshold
        if k <= 0:
            return []
        matches = self._vector_store.similarity_search(question, k, threshold)
        chunks = [RetrievedChunk(document=document, score=float(score)) for document, score in matches]
        chunks = [chunk for chunk in chunks if chunk.score >= threshold]
        chunks.sort(key=lambda chunk: chunk.score, reverse=True)
        return chunks[:k]
