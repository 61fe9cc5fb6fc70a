"""Document resources and page-level text extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from langchain_core.documents import Document

from kotlin_docs_chatbot.errors import DocumentReadError

LOGGER = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}
SUPPORTED_EXTENSIONS = {".pdf", *TEXT_EXTENSIONS}


@dataclass(slots=True, frozen=True)
class DocumentResource:
    """A readable source document on the local filesystem."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        return self.path.is_file()

    def pages(self) -> list[Document]:
        """Return one ``Document`` per page, tagged with a 1-based ``page_number``."""
        if not self.exists():
            message = f"Document not found: {self.path}"
            raise DocumentReadError(message)
        suffix = self.path.suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            allowed = ", ".join(sorted(SUPPORTED_EXTENSIONS))
            message = f"Unsupported file extension '{self.path.suffix}'. Supported extensions: {allowed}"
            raise DocumentReadError(message)
        try:
            texts = self._read_pdf() if suffix == ".pdf" else [self.path.read_text(encoding="utf-8")]
        except DocumentReadError:
            raise
        except Exception as exc:
            message = f"Unable to read {self.name}: {exc}"
            raise DocumentReadError(message) from exc
        LOGGER.debug("Read %s page(s) from %s", len(texts), self.path)
        return [
            Document(page_content=text, metadata={"page_number": number})
            for number, text in enumerate(texts, start=1)
        ]

    def _read_pdf(self) -> list[str]:
        try:
            from pypdf import PdfReader
        except ImportError as exc:  # pragma: no cover - dependency should exist
            message = "Install 'pypdf' to enable PDF ingestion"
            raise DocumentReadError(message) from exc

        reader = PdfReader(str(self.path))
        return [page.extract_text() or "" for page in reader.pages]
