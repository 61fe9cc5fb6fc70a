"""RAG pipeline components for the Kotlin documentation chatbot."""

from .answer_generation import KOTLIN_EXPERT_PROMPT, AnswerGenerator
from .chunking import ChunkingConfig, TokenChunker
from .confidence import ConfidenceLevel, score_confidence
from .context import assemble_context
from .documents import DocumentResource
from .embeddings import EmbeddingConfig, EmbeddingFactory
from .ingestion import (
    DocumentIngestionPipeline,
    IngestionConfig,
    ProcessingFailure,
    ProcessingResult,
    ProcessingSuccess,
)
from .metadata import ChunkMetadata, MetadataEnricher
from .retrieval import RetrievalConfig, RetrievedChunk, Retriever
from .vector_store import VectorStoreConfig, VectorStoreManager

__all__ = [
    "KOTLIN_EXPERT_PROMPT",
    "AnswerGenerator",
    "ChunkMetadata",
    "ChunkingConfig",
    "ConfidenceLevel",
    "DocumentIngestionPipeline",
    "DocumentResource",
    "EmbeddingConfig",
    "EmbeddingFactory",
    "IngestionConfig",
    "MetadataEnricher",
    "ProcessingFailure",
    "ProcessingResult",
    "ProcessingSuccess",
    "RetrievalConfig",
    "RetrievedChunk",
    "Retriever",
    "TokenChunker",
    "VectorStoreConfig",
    "VectorStoreManager",
    "assemble_context",
    "score_confidence",
]
