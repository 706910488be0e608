"""
Vector index factory for selecting between local FAISS (dev) and S3 Vectors (prod).

Depends on VECTOR_STORE_STORE_TYPE.

Dependencies: langchain_core, docchat.boundary.vdb, docchat.configs
System role: Vector index instantiation and selection
"""

import logging

from langchain_core.embeddings import Embeddings

from docchat.boundary.vdb.memory_index import InMemoryVectorIndex
from docchat.boundary.vdb.s3_vectors_index import S3VectorsIndex
from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.configs.vector_store import VectorStoreSettings
from docchat.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_vector_index(
    settings: VectorStoreSettings,
    embeddings: Embeddings | None = None,
) -> VectorIndex:
    """
    Build the vector index selected by configuration.

    Args:
        settings: Vector store settings
        embeddings: Embedding model, required by the local FAISS index

    Returns:
        VectorIndex: InMemoryVectorIndex or S3VectorsIndex

    Raises:
        ConfigurationError: If store_type is not 'memory' or 's3', or the
            memory store is selected without an embedding model
    """
    store_type = settings.store_type.lower()

    if store_type == "memory":
        if embeddings is None:
            raise ConfigurationError("The memory store needs an embedding model")
        logger.info(f"{__name__}:get_vector_index - Creating local FAISS index (local dev mode)")
        return InMemoryVectorIndex(embeddings)

    if store_type == "s3":
        logger.info(f"{__name__}:get_vector_index - Creating S3 Vectors index (production mode)")
        return S3VectorsIndex(
            vectors_bucket=settings.vectors_bucket,
            index_name=settings.index_name,
            region=settings.aws_region,
            list_page_size=settings.list_page_size,
            delete_batch_size=settings.delete_batch_size,
        )

    raise ConfigurationError(
        f"Invalid store_type: {store_type}. Must be 'memory' (dev) or 's3' (production).",
        details={"store_type": store_type},
    )
