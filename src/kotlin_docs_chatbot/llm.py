"""Language model client helpers."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

LOGGER = logging.getLogger(__name__)


def check_ollama_connection(base_url: str = "http://localhost:11434", timeout: int = 2) -> bool:
    """Check if Ollama is running and accessible."""
    try:
        response = requests.get(f"{base_url}/api/tags", timeout=timeout)
        return response.status_code == 200
    except (OSError, requests.exceptions.ConnectionError, requests.exceptions.Timeout):
        return False


def check_ollama_model(base_url: str, model_name: str, timeout: int = 2) -> tuple[bool, list[str]]:
    """Check if a specific Ollama model is installed. Returns (is_installed, available_models)."""
    try:
        response = requests.get(f"{base_url}/api/tags", timeout=timeout)
        data = response.json()
    except (OSError, requests.exceptions.ConnectionError, requests.exceptions.Timeout, ValueError):
        return False, []
    if response.status_code != 200:
        return False, []

    models = [model.get("name", "") for model in data.get("models", [])]
    base_name = model_name.split(":")[0]
    installed = any(model == model_name or model.split(":")[0] == base_name for model in models)
    return installed, models


def _response_text(response: Any) -> str:
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    content = getattr(response, "content", None)
    if content is None:
        return ""
    if isinstance(content, list):
        # Chat models may return content blocks; keep only the text parts.
        return "".join(block if isinstance(block, str) else str(block.get("text", "")) for block in content)
    return str(content)


class LangChainLLMAdapter:
    """Wraps a LangChain chat model behind a blocking ``generate(prompt) -> str`` call."""

    def __init__(self, settings: dict[str, Any], *, llm: Any | None = None) -> None:
        self.provider = str(settings.get("provider", "ollama"))
        self.settings = settings
        self.llm = llm if llm is not None else self._initialize_llm()

    def _initialize_llm(self) -> Any:  # pragma: no cover - depends on runtime environment
        if self.provider == "ollama":
            from langchain_ollama import ChatOllama

            return ChatOllama(
                model=self.settings.get("model", "llama3.1:8b"),
                base_url=self.settings.get("base_url", "http://localhost:11434"),
                temperature=self.settings.get("temperature", 0.2),
                num_ctx=self.settings.get("num_ctx", 8192),
                num_predict=self.settings.get("max_tokens", 2048),
            )
        if self.provider == "openai":
            from langchain_openai import ChatOpenAI

            api_key_env = self.settings.get("api_key_env", "OPENAI_API_KEY")
            return ChatOpenAI(
                model=self.settings.get("model", "gpt-4o-mini"),
                temperature=self.settings.get("temperature", 0.2),
                max_tokens=self.settings.get("max_tokens", 2048),  # type: ignore[call-arg]
                base_url=self.settings.get("base_url"),
                api_key=os.environ.get(api_key_env),
                timeout=self.settings.get("timeout"),
            )
        message = f"Unsupported LLM provider: {self.provider}"
        raise ValueError(message)

    def generate(self, prompt: str, **kwargs: Any) -> str:
        LOGGER.debug("Sending %d-char prompt to %s", len(prompt), self.provider)
        return _response_text(self.llm.invoke(prompt, **kwargs))
