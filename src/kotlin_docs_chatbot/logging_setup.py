"""Root logger configuration for the CLI and HTTP entry points."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_HANDLER_NAME = "kotlin-docs-chatbot"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single rich handler on the root logger; repeat calls only adjust the level."""
    root = logging.getLogger()
    root.setLevel(level)
    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    # Chroma and httpx are chatty at INFO.
    for noisy in ("chromadb", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
