"""
Local FAISS vector index for development.

Keeps one LangChain FAISS store per namespace in process memory so the
document pipeline can run without AWS S3 Vectors. Vectors are L2-normalized
on the way in, so the squared L2 distance FAISS returns maps directly onto
cosine similarity. Nothing is persisted.

Dependencies: faiss, langchain_community.vectorstores, langchain_core
System role: Development vector index (local testing only)
"""

import logging
from collections import Counter
from collections.abc import Sequence

import faiss
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_core.embeddings import Embeddings

from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.boundary.vdb.vector_schemas import VectorMatch, VectorRecord
from docchat.core.exceptions import VectorIndexError

logger = logging.getLogger(__name__)


def distance_to_score(distance: float) -> float:
    """Convert squared L2 distance between unit vectors to cosine similarity in [0, 1]."""
    return max(0.0, min(1.0, 1.0 - float(distance) / 2.0))


class InMemoryVectorIndex(VectorIndex):
    """
    FAISS-backed vector index keyed by namespace.

    Each namespace gets its own flat L2 index, created on first upsert with the
    dimension of the first record. The embeddings object is only handed to
    FAISS; every operation here works on precomputed vectors.
    """

    def __init__(self, embeddings: Embeddings) -> None:
        """
        Initialize FAISS index.

        Args:
            embeddings: Embedding model the stored vectors came from
        """
        self._embeddings = embeddings
        self._stores: dict[str, FAISS] = {}

    def _new_store(self, dimension: int) -> FAISS:
        return FAISS(
            embedding_function=self._embeddings,
            index=faiss.IndexFlatL2(dimension),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
            normalize_L2=True,
        )

    @staticmethod
    def _check_dimension(store: FAISS, vector: Sequence[float], operation: str) -> None:
        if len(vector) != store.index.d:
            raise VectorIndexError(
                f"Vector dimension {len(vector)} does not match index dimension {store.index.d}",
                operation=operation,
            )

    @staticmethod
    def _documents(store: FAISS):
        for record_id in list(store.index_to_docstore_id.values()):
            yield record_id, store.docstore.search(record_id)

    async def upsert(self, namespace: str, records: Sequence[VectorRecord]) -> None:
        if not records:
            return
        # Last write wins for ids repeated within one batch.
        latest = {record.id: record for record in records}

        store = self._stores.get(namespace)
        if store is None:
            store = self._new_store(len(records[0].values))
            self._stores[namespace] = store
        for record in latest.values():
            self._check_dimension(store, record.values, "upsert")

        existing = set(store.index_to_docstore_id.values())
        replaced = [record_id for record_id in latest if record_id in existing]
        if replaced:
            store.delete(replaced)

        store.add_embeddings(
            text_embeddings=[(r.metadata.text, list(r.values)) for r in latest.values()],
            metadatas=[r.metadata.model_dump() for r in latest.values()],
            ids=list(latest),
        )
        logger.debug(
            f"{__name__}:upsert - Stored records",
            extra={"namespace": namespace, "count": len(latest), "replaced": len(replaced)},
        )

    async def query(self, namespace: str, vector: Sequence[float], top_k: int) -> list[VectorMatch]:
        store = self._stores.get(namespace)
        if store is None or top_k <= 0 or store.index.ntotal == 0:
            return []
        self._check_dimension(store, vector, "query")

        results = store.similarity_search_with_score_by_vector(
            list(vector), k=min(top_k, store.index.ntotal)
        )
        matches = [
            VectorMatch(id=doc.id, score=distance_to_score(distance), metadata=dict(doc.metadata))
            for doc, distance in results
        ]
        # Descending score, ties broken by id for a stable order.
        matches.sort(key=lambda m: (-m.score, m.id))
        return matches

    async def delete_by_ids(self, namespace: str, ids: Sequence[str]) -> None:
        store = self._stores.get(namespace)
        if store is None:
            return
        existing = set(store.index_to_docstore_id.values())
        doomed = [record_id for record_id in dict.fromkeys(ids) if record_id in existing]
        if doomed:
            store.delete(doomed)

    async def delete_by_document(self, namespace: str, document_id: str) -> None:
        store = self._stores.get(namespace)
        if store is None:
            return
        doomed = [
            record_id
            for record_id, doc in self._documents(store)
            if doc.metadata.get("document_id") == document_id
        ]
        await self.delete_by_ids(namespace, doomed)

    async def delete_all(self, namespace: str) -> None:
        self._stores.pop(namespace, None)

    async def count_by_document(self, namespace: str) -> dict[str, int]:
        store = self._stores.get(namespace)
        if store is None:
            return {}
        return dict(Counter(doc.metadata.get("document_id") for _, doc in self._documents(store)))
