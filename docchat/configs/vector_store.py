"""
Vector store configuration settings.

Selects the vector index backend (local FAISS for development, S3 Vectors for
production) and the embedding model shared by ingest and query paths.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docchat.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector index configuration (memory for dev, S3 Vectors for prod)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="memory",
        description="Vector index type: 'memory' (local FAISS) for dev, 's3' for production",
    )
    vectors_bucket: str = Field(default="docchat-vectors", description="S3 Vectors bucket name")
    index_name: str = Field(default="documents", description="S3 Vectors index name")
    aws_region: str = Field(default="us-east-1", description="AWS region for S3 Vectors")

    embedding_model: str = Field(
        default="models/text-embedding-004",
        description="Google embedding model ID, identical for ingest and query",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Embedding vector dimension (fixed for the lifetime of an index)",
    )

    list_page_size: int = Field(default=500, description="Page size when enumerating vectors")
    delete_batch_size: int = Field(default=500, description="Maximum keys per delete request")
