"""Diagnostics utilities for the Kotlin documentation chatbot."""

from __future__ import annotations

import importlib
import platform
import sys
from dataclasses import dataclass

from langchain_core.embeddings import Embeddings

from kotlin_docs_chatbot.config import ChatbotConfig
from kotlin_docs_chatbot.errors import KnowledgeBaseError
from kotlin_docs_chatbot.llm import check_ollama_connection, check_ollama_model
from kotlin_docs_chatbot.rag.vector_store import VectorStoreManager


@dataclass(slots=True)
class DiagnosticResult:
    status: str
    details: str

    def as_dict(self) -> dict[str, str]:
        return {"status": self.status, "details": self.details}


class _DiagnosticsEmbeddings(Embeddings):
    """Zero vectors; the health check only counts the collection."""

    def __init__(self, dimension: int = 3) -> None:
        self._dimension = dimension

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[0.0] * self._dimension for _ in texts]

    def embed_query(self, text: str) -> list[float]:
        return [0.0] * self._dimension


def _check_python_version() -> DiagnosticResult:
    if sys.version_info >= (3, 10):
        return DiagnosticResult("ok", f"Python {platform.python_version()} detected.")
    return DiagnosticResult("warn", f"Python {platform.python_version()} detected; 3.10 or newer is required.")


def _check_optional_dependency(module_name: str, friendly_name: str) -> DiagnosticResult:
    try:
        importlib.import_module(module_name)
    except ImportError as exc:
        return DiagnosticResult("warn", f"{friendly_name} missing: {exc}")
    return DiagnosticResult("ok", f"{friendly_name} available.")


def _check_vector_store(config: ChatbotConfig) -> DiagnosticResult:
    manager = VectorStoreManager(_DiagnosticsEmbeddings(), config.vector_store_config())
    try:
        chunk_count = manager.count()
    except KnowledgeBaseError as exc:
        cause = exc.__cause__ or exc
        return DiagnosticResult("error", f"Vector store health check failed: {str(cause)[:200]}")
    return DiagnosticResult(
        "ok",
        f"Chroma collection '{manager.collection_name}' accessible ({chunk_count} chunks).",
    )


def _check_ollama(config: ChatbotConfig) -> DiagnosticResult:
    llm_settings = config.llm_settings()
    if llm_settings.get("provider") != "ollama":
        return DiagnosticResult("not_applicable", "LLM provider is not Ollama.")
    base_url = llm_settings.get("base_url", "http://localhost:11434")
    if not check_ollama_connection(base_url):
        return DiagnosticResult("error", f"Ollama not reachable at {base_url}.")
    model_name = str(llm_settings.get("model", "llama3.1:8b"))
    installed, models = check_ollama_model(base_url, model_name)
    if not installed:
        available = ", ".join(models) if models else "none"
        return DiagnosticResult("warn", f"Model '{model_name}' missing. Available: {available}.")
    return DiagnosticResult("ok", f"Ollama reachable and model '{model_name}' installed.")


def _check_default_document(config: ChatbotConfig) -> DiagnosticResult:
    init_cfg = config.initialization_config()
    path = init_cfg.default_document_path
    if path.exists():
        return DiagnosticResult("ok", f"Default document found at {path}.")
    status = "warn" if init_cfg.auto_load_default_document else "not_applicable"
    return DiagnosticResult(status, f"Default document not found at {path}.")


def run_diagnostics(config: ChatbotConfig) -> dict[str, dict[str, str]]:
    """Run a suite of health checks and return structured results."""
    results: dict[str, dict[str, str]] = {}
    results["python"] = _check_python_version().as_dict()
    results["ollama"] = _check_ollama(config).as_dict()
    results["vector_store"] = _check_vector_store(config).as_dict()
    results["default_document"] = _check_default_document(config).as_dict()

    optional_dependencies = {
        "pypdf": "PDF ingestion (pypdf)",
        "tiktoken": "Token counting (tiktoken)",
        "langchain_huggingface": "Sentence-transformer embeddings",
        "langchain_openai": "OpenAI LLM/embeddings integration",
    }
    for module_name, friendly in optional_dependencies.items():
        results[f"dep:{module_name}"] = _check_optional_dependency(module_name, friendly).as_dict()

    return results


__all__ = ["DiagnosticResult", "run_diagnostics"]
