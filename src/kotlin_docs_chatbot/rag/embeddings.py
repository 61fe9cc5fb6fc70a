"""Embedding client construction for the vector store."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Literal

from langchain_core.embeddings import Embeddings

LOGGER = logging.getLogger(__name__)

ProviderLiteral = Literal["sentence-transformers", "openai", "ollama"]


def _resolve_device(device: str | None) -> str:
    """Map ``auto``/``None`` to ``cuda`` when available, else ``cpu``."""
    if device is None or device == "auto":
        try:
            import torch

            return "cuda" if torch.cuda.is_available() else "cpu"
        except ImportError:
            return "cpu"
    return device


@dataclass(slots=True, frozen=True)
class EmbeddingConfig:
    """Configuration parameters for creating embedding functions."""

    provider: ProviderLiteral = "sentence-transformers"
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str | None = "cpu"
    normalize_embeddings: bool = True
    base_url: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    dimensions: int | None = None


class EmbeddingFactory:
    """Builds and memoizes the embedding client named by the config."""

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()
        self._embedding: Embeddings | None = None
        self._builders = {
            "sentence-transformers": self._build_sentence_transformers,
            "openai": self._build_openai,
            "ollama": self._build_ollama,
        }

    @property
    def config(self) -> EmbeddingConfig:
        return self._config

    def build(self) -> Embeddings:
        if self._embedding is None:
            builder = self._builders.get(self._config.provider)
            if builder is None:
                message = f"Unsupported embedding provider: {self._config.provider}"
                raise ValueError(message)
            self._embedding = builder()
        return self._embedding

    def _build_sentence_transformers(self) -> Embeddings:
        from langchain_huggingface import HuggingFaceEmbeddings

        device = _resolve_device(self._config.device)
        LOGGER.info("Loading sentence-transformer model '%s' (device=%s)", self._config.model_name, device)
        return HuggingFaceEmbeddings(
            model_name=self._config.model_name,
            model_kwargs={"device": device},
            encode_kwargs={"normalize_embeddings": self._config.normalize_embeddings},
        )

    def _build_openai(self) -> Embeddings:
        from langchain_openai import OpenAIEmbeddings

        LOGGER.info("Loading OpenAI embedding model '%s'", self._config.model_name)
        options: dict[str, Any] = {
            "model": self._config.model_name,
            "api_key": os.environ.get(self._config.api_key_env),
            "base_url": self._config.base_url,
        }
        if self._config.dimensions:
            options["dimensions"] = self._config.dimensions
        return OpenAIEmbeddings(**options)

    def _build_ollama(self) -> Embeddings:
        from langchain_ollama import OllamaEmbeddings

        base_url = self._config.base_url or "http://localhost:11434"
        LOGGER.info("Loading Ollama embedding model '%s' from %s", self._config.model_name, base_url)
        return OllamaEmbeddings(model=self._config.model_name, base_url=base_url)
