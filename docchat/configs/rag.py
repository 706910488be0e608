"""
RAG pipeline configuration settings.

Chunking policy, retrieval depth, and Gemini generation parameters.

Dependencies: pydantic, pydantic_settings
System role: Configuration for ingest and query paths
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docchat.configs.base import BaseSettings


class RAGSettings(BaseSettings):
    """Chunking, retrieval and generation settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAG_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1000, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(
        default=200,
        description="Characters repeated from the previous chunk",
    )
    top_k: int = Field(default=5, description="Number of chunks retrieved per query")

    llm_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini chat model used for answer generation",
    )
    temperature: float = Field(default=0.7, description="Generation temperature")
    max_output_tokens: int = Field(default=1024, description="Maximum answer length in tokens")
    llm_timeout_seconds: float = Field(
        default=60.0,
        description="Client-side wait limit for a single generation call",
    )
    google_api_key: str | None = Field(
        default=None,
        description="Google API key (falls back to GOOGLE_API_KEY when unset)",
    )

    default_namespace: str = Field(default="default", description="Namespace used when none is given")
    history_window: int = Field(
        default=20,
        description="Maximum number of prior conversation turns sent to the model",
    )
