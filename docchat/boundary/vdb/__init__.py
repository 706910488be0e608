"""
Vector index boundary.

Dependencies: boto3 (S3 Vectors backend), langchain_community FAISS (local backend)
System role: Namespaced vector storage for retrieval
"""

from docchat.boundary.vdb.memory_index import InMemoryVectorIndex
from docchat.boundary.vdb.s3_vectors_index import S3VectorsIndex
from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.boundary.vdb.vector_index_factory import get_vector_index
from docchat.boundary.vdb.vector_schemas import VectorMatch, VectorMetadata, VectorRecord

__all__ = [
    "InMemoryVectorIndex",
    "S3VectorsIndex",
    "VectorIndex",
    "VectorMatch",
    "VectorMetadata",
    "VectorRecord",
    "get_vector_index",
]
