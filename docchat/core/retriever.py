"""
Retriever.

Embeds the query, searches the namespace and maps raw index hits to
RetrievedMatch. Zero matches is a valid result, not an error; service
failures surface as EmbeddingServiceError or VectorIndexError.

Dependencies: docchat.boundary.llm, docchat.boundary.vdb
System role: First stage of the query path
"""

import logging
from typing import Any

from docchat.boundary.llm.embedding_client import EmbeddingClient
from docchat.boundary.vdb.vector_index import VectorIndex
from docchat.boundary.vdb.vector_schemas import VectorMatch
from docchat.models.chat import RetrievedMatch

logger = logging.getLogger(__name__)


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


def to_retrieved_match(match: VectorMatch) -> RetrievedMatch:
    """Map a raw hit, defaulting a missing score and page to 0."""
    metadata = match.metadata
    score = match.score if match.score is not None else 0.0
    return RetrievedMatch(
        id=match.id,
        score=max(0.0, min(1.0, score)),
        text=metadata.get("text") or "",
        source=metadata.get("source") or "unknown",
        page=_as_int(metadata.get("page")),
        document_id=metadata.get("document_id"),
    )


class Retriever:
    """Query-to-matches stage."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_index: VectorIndex,
        top_k: int = 5,
    ) -> None:
        self._embedder = embedding_client
        self._index = vector_index
        self.top_k = top_k

    async def retrieve(
        self,
        query: str,
        namespace: str,
        top_k: int | None = None,
    ) -> list[RetrievedMatch]:
        """
        Retrieve ranked chunk matches for a query.

        Args:
            query: User question
            namespace: Namespace to search
            top_k: Override of the configured result count

        Returns:
            list[RetrievedMatch]: Descending by score; empty when nothing matched
        """
        k = top_k or self.top_k
        logger.info(
            f"{__name__}:retrieve - START query='{query[:80]}'",
            extra={"namespace": namespace, "top_k": k},
        )
        vector = await self._embedder.embed_one(query)
        raw = await self._index.query(namespace, vector, k)
        matches = [to_retrieved_match(m) for m in raw]
        matches.sort(key=lambda m: m.score, reverse=True)

        if not matches:
            logger.info(f"{__name__}:retrieve - No matches", extra={"namespace": namespace})
        else:
            logger.info(
                f"{__name__}:retrieve - Found {len(matches)} matches",
                extra={"namespace": namespace},
            )
        return matches
