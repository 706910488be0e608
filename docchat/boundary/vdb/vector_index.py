"""
Vector index contract.

Dependencies: docchat.boundary.vdb.vector_schemas
System role: Abstract interface implemented by the local FAISS and S3 Vectors backends
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from docchat.boundary.vdb.vector_schemas import VectorMatch, VectorRecord


class VectorIndex(ABC):
    """
    Namespaced vector index.

    Namespaces never share data. Every operation raises VectorIndexError on
    backend failure.
    """

    @abstractmethod
    async def upsert(self, namespace: str, records: Sequence[VectorRecord]) -> None:
        """Insert or overwrite records by id."""

    @abstractmethod
    async def query(self, namespace: str, vector: Sequence[float], top_k: int) -> list[VectorMatch]:
        """Return up to top_k matches by descending score; empty when the namespace has no data."""

    @abstractmethod
    async def delete_by_ids(self, namespace: str, ids: Sequence[str]) -> None:
        """Delete records by id."""

    @abstractmethod
    async def delete_by_document(self, namespace: str, document_id: str) -> None:
        """Delete every record whose metadata document_id matches."""

    @abstractmethod
    async def delete_all(self, namespace: str) -> None:
        """Delete every record in the namespace."""

    @abstractmethod
    async def count_by_document(self, namespace: str) -> dict[str, int]:
        """Return the number of stored records per document_id."""
