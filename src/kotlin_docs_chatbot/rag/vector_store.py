"""Vector store management utilities for the Kotlin documentation chatbot."""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import chromadb
from chromadb.api import ClientAPI
from chromadb.config import Settings
from langchain_chroma import Chroma
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from kotlin_docs_chatbot.errors import KnowledgeBaseError

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class VectorStoreConfig:
    """Configuration for connecting to a vector store backend.

    When ``host`` is set the manager talks to a remote Chroma server; otherwise
    it opens a persistent local client under ``persist_directory``.
    """

    collection_name: str = "kotlin_docs"
    persist_directory: Path = Path("data/chroma")
    host: str | None = None
    port: int = 8000
    ssl: bool = False
    api_key_env: str | None = None
    distance: str = "cosine"


class VectorStoreManager:
    """Adds chunks to, and searches, a single Chroma collection."""

    def __init__(self, embeddings: Embeddings, config: VectorStoreConfig | None = None) -> None:
        self._embeddings = embeddings
        self._config = config or VectorStoreConfig()
        self._store: Chroma | None = None

    @property
    def collection_name(self) -> str:
        return self._config.collection_name

    def add_documents(self, documents: Sequence[Document]) -> list[str]:
        """Add a batch of documents to the vector store and return their IDs."""
        doc_list = list(documents)
        if not doc_list:
            return []
        ids: list[str] = []
        for doc in doc_list:
            doc_id = doc.metadata.get("document_id")
            if not doc_id:
                doc_id = f"chunk-{uuid.uuid4().hex}"
                doc.metadata["document_id"] = doc_id
            ids.append(str(doc_id))

        LOGGER.info("Adding %s documents to vector store '%s'", len(doc_list), self._config.collection_name)
        try:
            self._ensure_store().add_documents(doc_list, ids=ids)
        except KnowledgeBaseError:
            raise
        except Exception as exc:
            message = f"Failed to write to collection '{self._config.collection_name}'"
            raise KnowledgeBaseError(message) from exc
        return ids

    def similarity_search(self, query: str, top_k: int, threshold: float) -> list[tuple[Document, float]]:
        """Return up to ``top_k`` (document, relevance) pairs scoring at least ``threshold``."""
        try:
            results = self._ensure_store().similarity_search_with_relevance_scores(
                query,
                k=top_k,
                score_threshold=threshold,
            )
        except KnowledgeBaseError:
            raise
        except Exception as exc:
            message = "Failed to search knowledge base"
            raise KnowledgeBaseError(message) from exc
        LOGGER.debug("Vector search returned %s documents for query: %s", len(results), query)
        return results

    def count(self) -> int:
        try:
            return int(self._ensure_store()._collection.count())
        except KnowledgeBaseError:
            raise
        except Exception as exc:
            message = f"Failed to count collection '{self._config.collection_name}'"
            raise KnowledgeBaseError(message) from exc

    def reset(self) -> None:
        """Drop the collection; it is recreated empty on next use."""
        store = self._ensure_store()
        LOGGER.info("Deleting collection '%s'", self._config.collection_name)
        store.delete_collection()
        self._store = None

    def check_health(self) -> tuple[bool, str | None]:
        """Check if the vector store is healthy and accessible.

        Returns:
            Tuple of (is_healthy, error_message). If healthy, error_message is None.
        """
        try:
            self.count()
        except KnowledgeBaseError as exc:
            cause = exc.__cause__ or exc
            return False, f"Vector store health check failed: {str(cause)[:200]}"
        return True, None

    def _ensure_store(self) -> Chroma:
        if self._store is None:
            try:
                client = self._build_client()
                self._store = Chroma(
                    client=client,
                    collection_name=self._config.collection_name,
                    embedding_function=self._embeddings,
                    collection_metadata={"hnsw:space": self._config.distance},
                )
            except Exception as exc:
                message = f"Failed to connect to vector store collection '{self._config.collection_name}'"
                raise KnowledgeBaseError(message) from exc
        return self._store

    def _build_client(self) -> ClientAPI:
        settings = Settings(anonymized_telemetry=False, allow_reset=True)
        if self._config.host:
            LOGGER.info(
                "Initializing Chroma client with host: %s, port: %s, TLS: %s",
                self._config.host,
                self._config.port,
                self._config.ssl,
            )
            headers: dict[str, Any] = {}
            api_key = os.environ.get(self._config.api_key_env) if self._config.api_key_env else None
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
            return chromadb.HttpClient(
                host=self._config.host,
                port=self._config.port,
                ssl=self._config.ssl,
                headers=headers or None,
                settings=settings,
            )
        self._config.persist_directory.mkdir(parents=True, exist_ok=True)
        LOGGER.debug(
            "Initializing Chroma vector store(collection=%s, persist_dir=%s)",
            self._config.collection_name,
            self._config.persist_directory,
        )
        return chromadb.PersistentClient(path=str(self._config.persist_directory), settings=settings)
