"""Provenance metadata attached to every chunk before it is stored."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from langchain_core.documents import Document

PREVIEW_LENGTH = 100
UNKNOWN_SOURCE = "unknown"


def build_preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Return the first ``limit`` characters, with an ellipsis when truncated."""
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text


@dataclass(slots=True, frozen=True)
class ChunkMetadata:
    """Named metadata fields written alongside each chunk."""

    source: str
    chunk_index: int
    content_type: str
    language: str
    content_preview: str
    page_number: int | None = None
    document_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "source": self.source,
            "chunk_index": self.chunk_index,
            "content_type": self.content_type,
            "language": self.language,
            "content_preview": self.content_preview,
        }
        if self.page_number is not None:
            payload["page_number"] = self.page_number
        if self.document_id is not None:
            payload["document_id"] = self.document_id
        return payload


class MetadataEnricher:
    """Annotates chunks in place with source, position and a content preview."""

    def __init__(self, *, content_type: str = "kotlin_documentation", language: str = "kotlin") -> None:
        self._content_type = content_type
        self._language = language

    def enrich(self, chunks: Sequence[Document], source_name: str | None) -> None:
        source = source_name or UNKNOWN_SOURCE
        for index, chunk in enumerate(chunks):
            record = ChunkMetadata(
                source=source,
                chunk_index=index,
                content_type=self._content_type,
                language=self._language,
                content_preview=build_preview(chunk.page_content),
                page_number=chunk.metadata.get("page_number"),
                document_id=chunk.metadata.get("document_id"),
            )
            chunk.metadata.update(record.as_dict())
