"""Answer generation from assembled context and the user's question."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests
from langchain_core.prompts import PromptTemplate

from kotlin_docs_chatbot.errors import GenerationError

LOGGER = logging.getLogger(__name__)

KOTLIN_EXPERT_PROMPT = """\
You are a highly knowledgeable Kotlin expert and teacher. Your goal is to provide accurate,
comprehensive, and educational answers about Kotlin programming.

Based on the provided context from official Kotlin documentation, answer the user's question.

Guidelines:
1. Provide clear, accurate, and well-structured answers
2. Include code examples when relevant
3. Explain concepts in a teaching manner
4. If the context doesn't contain enough information, say so clearly
5. Focus specifically on Kotlin-related topics
6. Structure your response in a clear, educational format

Context from Kotlin Documentation:
{context}

User Question: {question}

Answer:
"""

_REQUIRED_SLOTS = {"context", "question"}


class TextGenerator(Protocol):
    def generate(self, prompt: str, **kwargs: Any) -> str: ...


class AnswerGenerator:
    """Fills the instructional template and asks the language model for an answer."""

    def __init__(self, llm_client: TextGenerator, *, template: str = KOTLIN_EXPERT_PROMPT) -> None:
        self._llm_client = llm_client
        self._prompt = PromptTemplate.from_template(template)
        missing = _REQUIRED_SLOTS - set(self._prompt.input_variables)
        if missing:
            message = f"Prompt template is missing slot(s): {', '.join(sorted(missing))}"
            raise ValueError(message)

    def build_prompt(self, question: str, context: str) -> str:
        return self._prompt.format(context=context, question=question)

    def generate(self, question: str, context: str) -> str:
        prompt = self.build_prompt(question, context)
        LOGGER.debug("Invoking LLM with prompt of %d chars", len(prompt))
        try:
            answer = self._llm_client.generate(prompt)
        except requests.exceptions.ConnectionError as exc:
            LOGGER.error("Could not reach the language model: %s", exc, exc_info=True)
            message = f"Failed to connect to LLM service: {exc}"
            raise GenerationError(message) from exc
        except Exception as exc:
            LOGGER.error("Error generating answer with chat model: %s", exc, exc_info=True)
            message = "Failed to generate response"
            raise GenerationError(message) from exc
        answer = answer or ""
        LOGGER.debug("Generated answer with %d characters", len(answer))
        return answer
