"""Kotlin documentation chatbot: retrieval-augmented answers over Kotlin docs."""

__version__ = "1.0.0"
