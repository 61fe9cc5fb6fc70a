from __future__ import annotations

from pathlib import Path

import pytest

from kotlin_docs_chatbot import diagnostics
from kotlin_docs_chatbot.config import ChatbotConfig
from kotlin_docs_chatbot.errors import KnowledgeBaseError
from kotlin_docs_chatbot.rag import VectorStoreManager


def build_config(tmp_path: Path, provider: str = "ollama") -> ChatbotConfig:
    return ChatbotConfig.from_dict(
        {
            "llm": {"provider": provider, "providers": {"ollama": {"model": "llama3.1:8b"}, "openai": {}}},
            "vector_store": {"persist_directory": str(tmp_path / "chroma")},
            "initialization": {"default_document_path": str(tmp_path / "kotlin-docs.pdf")},
        }
    )


def test_diagnostics_report_each_check(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(diagnostics, "check_ollama_connection", lambda base_url: False)

    results = diagnostics.run_diagnostics(build_config(tmp_path))

    assert results["python"]["status"] in {"ok", "warn"}
    assert results["ollama"]["status"] == "error"
    assert results["vector_store"]["status"] == "ok"
    assert "0 chunks" in results["vector_store"]["details"]
    assert results["default_document"]["status"] == "not_applicable"
    assert "dep:pypdf" in results


def test_ollama_check_skipped_for_other_providers(tmp_path: Path) -> None:
    results = diagnostics.run_diagnostics(build_config(tmp_path, provider="openai"))

    assert results["ollama"]["status"] == "not_applicable"


def test_missing_model_is_a_warning(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(diagnostics, "check_ollama_connection", lambda base_url: True)
    monkeypatch.setattr(diagnostics, "check_ollama_model", lambda base_url, model: (False, ["mistral:7b"]))

    results = diagnostics.run_diagnostics(build_config(tmp_path))

    assert results["ollama"]["status"] == "warn"
    assert "mistral:7b" in results["ollama"]["details"]


def test_unreachable_vector_store_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_count(self) -> int:
        message = "Failed to count collection 'kotlin_docs'"
        raise KnowledgeBaseError(message) from ConnectionError("chroma down")

    monkeypatch.setattr(diagnostics, "check_ollama_connection", lambda base_url: False)
    monkeypatch.setattr(VectorStoreManager, "count", fail_count)

    results = diagnostics.run_diagnostics(build_config(tmp_path))

    assert results["vector_store"]["status"] == "error"
    assert "chroma down" in results["vector_store"]["details"]
