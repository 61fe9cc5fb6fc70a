from __future__ import annotations

import pytest
from langchain_core.embeddings import Embeddings

from kotlin_docs_chatbot.rag.embeddings import EmbeddingConfig, EmbeddingFactory


class DummyEmbeddings(Embeddings):
    def __init__(self) -> None:
        self.last_query: str | None = None

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[float(len(text))] for text in texts]

    def embed_query(self, text: str) -> list[float]:
        self.last_query = text
        return [float(len(text))]


def recording_ctor(dummy: Embeddings):
    def fake_ctor(**kwargs):
        fake_ctor.kwargs = kwargs
        return dummy

    return fake_ctor


def test_sentence_transformer_factory(monkeypatch: pytest.MonkeyPatch) -> None:
    dummy = DummyEmbeddings()
    fake_ctor = recording_ctor(dummy)
    monkeypatch.setattr("langchain_huggingface.HuggingFaceEmbeddings", fake_ctor)

    factory = EmbeddingFactory(EmbeddingConfig(model_name="sentence-transformers/test-model"))
    embeddings = factory.build()

    assert embeddings is dummy
    assert fake_ctor.kwargs["model_name"] == "sentence-transformers/test-model"
    assert fake_ctor.kwargs["model_kwargs"]["device"] == "cpu"
    assert fake_ctor.kwargs["encode_kwargs"] == {"normalize_embeddings": True}
    embeddings.embed_query("hello")
    assert dummy.last_query == "hello"


def test_sentence_transformer_auto_device(monkeypatch: pytest.MonkeyPatch) -> None:
    pytest.importorskip("torch")
    fake_ctor = recording_ctor(DummyEmbeddings())
    monkeypatch.setattr("langchain_huggingface.HuggingFaceEmbeddings", fake_ctor)
    monkeypatch.setattr("torch.cuda.is_available", lambda: False)

    EmbeddingFactory(EmbeddingConfig(device="auto")).build()

    assert fake_ctor.kwargs["model_kwargs"]["device"] == "cpu"


def test_ollama_factory_uses_default_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_ctor = recording_ctor(DummyEmbeddings())
    monkeypatch.setattr("langchain_ollama.OllamaEmbeddings", fake_ctor)

    EmbeddingFactory(EmbeddingConfig(provider="ollama", model_name="nomic-embed-text")).build()

    assert fake_ctor.kwargs == {"model": "nomic-embed-text", "base_url": "http://localhost:11434"}


def test_openai_factory_reads_key_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_ctor = recording_ctor(DummyEmbeddings())
    monkeypatch.setattr("langchain_openai.OpenAIEmbeddings", fake_ctor)
    monkeypatch.setenv("KOTLIN_BOT_KEY", "sk-test")

    config = EmbeddingConfig(
        provider="openai",
        model_name="text-embedding-3-small",
        api_key_env="KOTLIN_BOT_KEY",
        dimensions=256,
    )
    EmbeddingFactory(config).build()

    assert fake_ctor.kwargs["api_key"] == "sk-test"
    assert fake_ctor.kwargs["dimensions"] == 256


def test_factory_memoizes_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("langchain_huggingface.HuggingFaceEmbeddings", recording_ctor(DummyEmbeddings()))
    factory = EmbeddingFactory()

    assert factory.build() is factory.build()
