"""Configuration helpers for the Kotlin documentation chatbot."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml

from kotlin_docs_chatbot.rag.answer_generation import KOTLIN_EXPERT_PROMPT
from kotlin_docs_chatbot.rag.embeddings import EmbeddingConfig
from kotlin_docs_chatbot.rag.ingestion import IngestionConfig
from kotlin_docs_chatbot.rag.retrieval import RetrievalConfig
from kotlin_docs_chatbot.rag.vector_store import VectorStoreConfig

LLMProvider = Literal["ollama", "openai"]

DEFAULT_CONFIG_PATH = Path("configs/chatbot.yaml")

_EMBEDDING_DEFAULT_MODELS = {
    "sentence-transformers": "sentence-transformers/all-MiniLM-L6-v2",
    "openai": "text-embedding-3-small",
    "ollama": "nomic-embed-text",
}


@dataclass(slots=True, frozen=True)
class InitializationConfig:
    """Startup behaviour: whether to ingest a default document at boot."""

    auto_load_default_document: bool = False
    default_document_path: Path = Path("data/kotlin-docs.pdf")


@dataclass(slots=True, frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    api_prefix: str = "/api/kotlin-chatbot"
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(slots=True)
class ChatbotConfig:
    source: Path | None
    raw: dict[str, Any]

    @classmethod
    def from_file(cls, path: Path) -> ChatbotConfig:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.from_dict(raw, source=path)

    @classmethod
    def from_dict(cls, raw: dict[str, Any], *, source: Path | None = None) -> ChatbotConfig:
        instance = cls(source=source, raw=dict(raw))
        instance.validate()
        return instance

    def validate(self) -> None:
        """Reject settings the pipelines cannot run with."""
        ingestion = self.ingestion_config()
        ingestion.chunking_config().validate()
        if ingestion.batch_size <= 0:
            message = f"ingestion.batch_size must be positive, got {ingestion.batch_size}"
            raise ValueError(message)
        retrieval = self.retrieval_config()
        if retrieval.max_context_documents <= 0:
            message = f"chatbot.max_context_documents must be positive, got {retrieval.max_context_documents}"
            raise ValueError(message)
        if not 0.0 <= retrieval.similarity_threshold <= 1.0:
            message = f"chatbot.similarity_threshold must be within [0, 1], got {retrieval.similarity_threshold}"
            raise ValueError(message)
        if self.max_question_length() <= 0:
            message = "chatbot.max_question_length must be positive"
            raise ValueError(message)

    def llm_settings(self, provider: LLMProvider | None = None) -> dict[str, Any]:
        llm_cfg = self.raw.get("llm", {})
        provider_name: str = provider or llm_cfg.get("provider", "ollama")
        providers = llm_cfg.get("providers", {})
        provider_settings = providers.get(provider_name)
        if provider_settings is None:
            available = ", ".join(sorted(providers.keys()))
            message = f"Unsupported LLM provider '{provider_name}'. Available: {available or 'none'}."
            raise ValueError(message)
        merged = dict(provider_settings)
        merged["provider"] = provider_name
        for key, value in llm_cfg.items():
            if key not in {"provider", "providers"} and key not in merged:
                merged[key] = value
        return merged

    def embedding_settings(self) -> EmbeddingConfig:
        emb_cfg = self.raw.get("embedding", {})
        provider_name: str = emb_cfg.get("provider", "sentence-transformers")
        if provider_name not in _EMBEDDING_DEFAULT_MODELS:
            available = ", ".join(sorted(_EMBEDDING_DEFAULT_MODELS))
            message = f"Unsupported embedding provider '{provider_name}'. Available: {available}."
            raise ValueError(message)
        settings = emb_cfg.get("providers", {}).get(provider_name, {})
        defaults = EmbeddingConfig()
        return EmbeddingConfig(
            provider=provider_name,  # type: ignore[arg-type]
            model_name=settings.get("model_name", _EMBEDDING_DEFAULT_MODELS[provider_name]),
            device=settings.get("device", defaults.device),
            normalize_embeddings=settings.get("normalize_embeddings", defaults.normalize_embeddings),
            base_url=settings.get("base_url"),
            api_key_env=settings.get("api_key_env", defaults.api_key_env),
            dimensions=settings.get("dimensions"),
        )

    def vector_store_config(self) -> VectorStoreConfig:
        cfg = self.raw.get("vector_store", {})
        defaults = VectorStoreConfig()
        return VectorStoreConfig(
            collection_name=cfg.get("collection_name", defaults.collection_name),
            persist_directory=Path(cfg.get("persist_directory", defaults.persist_directory)),
            host=cfg.get("host", defaults.host),
            port=int(cfg.get("port", defaults.port)),
            ssl=bool(cfg.get("ssl", defaults.ssl)),
            api_key_env=cfg.get("api_key_env", defaults.api_key_env),
            distance=cfg.get("distance", defaults.distance),
        )

    def ingestion_config(self) -> IngestionConfig:
        cfg = self.raw.get("ingestion", {})
        defaults = IngestionConfig()
        return IngestionConfig(
            chunk_size=int(cfg.get("chunk_size", defaults.chunk_size)),
            chunk_overlap=int(cfg.get("chunk_overlap", defaults.chunk_overlap)),
            min_chunk_tokens=int(cfg.get("min_chunk_tokens", defaults.min_chunk_tokens)),
            max_chunk_tokens=int(cfg.get("max_chunk_tokens", defaults.max_chunk_tokens)),
            encoding_name=cfg.get("encoding_name", defaults.encoding_name),
            batch_size=int(cfg.get("batch_size", defaults.batch_size)),
            content_type=cfg.get("content_type", defaults.content_type),
            language=cfg.get("language", defaults.language),
        )

    def retrieval_config(self) -> RetrievalConfig:
        cfg = self.raw.get("chatbot", {})
        defaults = RetrievalConfig()
        return RetrievalConfig(
            max_context_documents=int(cfg.get("max_context_documents", defaults.max_context_documents)),
            similarity_threshold=float(cfg.get("similarity_threshold", defaults.similarity_threshold)),
        )

    def prompt_template(self) -> str:
        return str(self.raw.get("chatbot", {}).get("prompt_template") or KOTLIN_EXPERT_PROMPT)

    def max_question_length(self) -> int:
        return int(self.raw.get("chatbot", {}).get("max_question_length", 1000))

    def initialization_config(self) -> InitializationConfig:
        cfg = self.raw.get("initialization", {})
        defaults = InitializationConfig()
        return InitializationConfig(
            auto_load_default_document=bool(
                cfg.get("auto_load_default_document", defaults.auto_load_default_document)
            ),
            default_document_path=Path(cfg.get("default_document_path", defaults.default_document_path)),
        )

    def server_config(self) -> ServerConfig:
        cfg = self.raw.get("server", {})
        defaults = ServerConfig()
        return ServerConfig(
            host=cfg.get("host", defaults.host),
            port=int(cfg.get("port", defaults.port)),
            api_prefix=cfg.get("api_prefix", defaults.api_prefix),
            cors_origins=tuple(cfg.get("cors_origins", defaults.cors_origins)),
        )

    def logging_level(self) -> str:
        return str(self.raw.get("logging", {}).get("level", "INFO")).upper()
