"""Prompt context assembly from retrieved chunks."""

from __future__ import annotations

from collections.abc import Sequence

from kotlin_docs_chatbot.rag.retrieval import RetrievedChunk

SEPARATOR = "\n" + "=" * 50 + "\n"


def _format_chunk(chunk: RetrievedChunk) -> str:
    metadata = chunk.document.metadata
    lines: list[str] = []
    source = metadata.get("source")
    if source is not None:
        lines.append(f"Source: {source}\n")
    section = metadata.get("chunk_index")
    if section is not None:
        lines.append(f"Section: {section}\n")
    lines.append(chunk.text)
    lines.append("\n\n")
    return "".join(lines)


def assemble_context(chunks: Sequence[RetrievedChunk]) -> str:
    """Join chunks in order, each headed by its source and section when known."""
    return SEPARATOR.join(_format_chunk(chunk) for chunk in chunks)
