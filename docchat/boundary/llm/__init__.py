"""Embedding and language model boundary clients."""

from docchat.boundary.llm.embedding_client import EmbeddingClient
from docchat.boundary.llm.language_model_client import (
    LanguageModelClient,
    classify_generation_error,
)

__all__ = ["EmbeddingClient", "LanguageModelClient", "classify_generation_error"]
