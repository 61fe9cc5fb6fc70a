"""Token-bounded chunking of extracted document text."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import tiktoken
from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

LOGGER = logging.getLogger(__name__)

TokenCounter = Callable[[str], int]
_Piece = tuple[str, dict[str, Any]]

_SEPARATORS = ["\n\n", "\n", " ", ""]


@lru_cache(maxsize=None)
def _encoding(encoding_name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(encoding_name)


def tiktoken_counter(encoding_name: str = "cl100k_base") -> TokenCounter:
    """Return a token counter backed by a tiktoken encoding.

    The encoding is loaded on first use, not when the counter is created.
    """

    def count(text: str) -> int:
        return len(_encoding(encoding_name).encode(text, disallowed_special=()))

    return count


@dataclass(slots=True, frozen=True)
class ChunkingConfig:
    """Token budget for each chunk."""

    chunk_size: int = 800
    chunk_overlap: int = 100
    min_chunk_tokens: int = 5
    max_chunk_tokens: int = 10000
    encoding_name: str = "cl100k_base"

    def validate(self) -> None:
        if self.chunk_size <= 0:
            message = f"chunk_size must be positive, got {self.chunk_size}"
            raise ValueError(message)
        if not 0 <= self.chunk_overlap < self.chunk_size:
            message = f"chunk_overlap must be in [0, chunk_size), got {self.chunk_overlap}"
            raise ValueError(message)
        if self.min_chunk_tokens < 0:
            message = f"min_chunk_tokens must not be negative, got {self.min_chunk_tokens}"
            raise ValueError(message)
        if self.chunk_size + self.min_chunk_tokens > self.max_chunk_tokens:
            message = (
                f"chunk_size ({self.chunk_size}) plus min_chunk_tokens ({self.min_chunk_tokens}) "
                f"exceeds max_chunk_tokens ({self.max_chunk_tokens})"
            )
            raise ValueError(message)


class TokenChunker:
    """Split text into overlapping chunks measured in tokens.

    Consecutive chunks share ``chunk_overlap`` tokens. A chunk shorter than
    ``min_chunk_tokens`` is folded into its neighbour, and nothing longer than
    ``max_chunk_tokens`` is ever emitted.
    """

    def __init__(self, config: ChunkingConfig | None = None, *, token_counter: TokenCounter | None = None) -> None:
        self._config = config or ChunkingConfig()
        self._config.validate()
        self._count = token_counter or tiktoken_counter(self._config.encoding_name)
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=self._config.chunk_size,
            chunk_overlap=self._config.chunk_overlap,
            length_function=self._count,
            separators=_SEPARATORS,
        )
        self._ceiling_splitter = RecursiveCharacterTextSplitter(
            chunk_size=self._config.max_chunk_tokens,
            chunk_overlap=0,
            length_function=self._count,
            separators=_SEPARATORS,
        )
        LOGGER.debug(
            "Initialized TokenChunker(chunk_size=%s, chunk_overlap=%s, min=%s, max=%s)",
            self._config.chunk_size,
            self._config.chunk_overlap,
            self._config.min_chunk_tokens,
            self._config.max_chunk_tokens,
        )

    @property
    def config(self) -> ChunkingConfig:
        return self._config

    def split_text(self, text: str) -> list[str]:
        return [piece for piece, _ in self._split_pages([(text, {})])]

    def split_documents(self, pages: Sequence[Document]) -> list[Document]:
        """Chunk a document's pages in order, carrying page metadata onto each chunk.

        Windows never span a page break, but an undersized piece at the start or
        end of a page is merged across it into the neighbouring chunk.
        """
        pieces = self._split_pages([(page.page_content, page.metadata) for page in pages])
        return [Document(page_content=text, metadata=metadata) for text, metadata in pieces]

    def _split_pages(self, pages: Sequence[tuple[str, dict[str, Any]]]) -> list[_Piece]:
        pieces: list[_Piece] = []
        for text, metadata in pages:
            for piece in self._splitter.split_text(text):
                piece = piece.strip()
                if piece:
                    pieces.append((piece, dict(metadata)))
        return self._enforce_ceiling(self._merge_small(pieces))

    def _merge_small(self, pieces: list[_Piece]) -> list[_Piece]:
        merged: list[_Piece] = []
        carry: _Piece | None = None
        for text, metadata in pieces:
            if carry is not None:
                text, metadata = f"{carry[0]} {text}", carry[1]
                carry = None
            if self._count(text) < self._config.min_chunk_tokens:
                if merged:
                    previous_text, previous_metadata = merged[-1]
                    merged[-1] = (f"{previous_text} {text}", previous_metadata)
                else:
                    carry = (text, metadata)
                continue
            merged.append((text, metadata))
        if carry is not None:
            # The whole document is shorter than the minimum; keep it rather than lose it.
            merged.append(carry)
        return merged

    def _enforce_ceiling(self, pieces: list[_Piece]) -> list[_Piece]:
        bounded: list[_Piece] = []
        for text, metadata in pieces:
            if self._count(text) > self._config.max_chunk_tokens:
                LOGGER.debug("Re-splitting oversized chunk of %s tokens", self._count(text))
                bounded.extend(
                    (part.strip(), dict(metadata))
                    for part in self._ceiling_splitter.split_text(text)
                    if part.strip()
                )
            else:
                bounded.append((text, metadata))
        return bounded
