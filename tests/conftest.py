"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite registry, local FAISS vector index, deterministic
fake embeddings and chat model, wired services.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docchat.application.services.chat_service import ChatService
from docchat.application.services.document_service import DocumentService
from docchat.boundary.db.base import Base
from docchat.boundary.db.connection import get_async_session_factory
from docchat.boundary.llm.embedding_client import EmbeddingClient
from docchat.boundary.llm.language_model_client import LanguageModelClient
from docchat.boundary.vdb.memory_index import InMemoryVectorIndex
from docchat.core.chunker import Chunker
from docchat.core.context_assembler import ContextAssembler
from docchat.core.generation import GenerationOrchestrator
from docchat.core.registry import DocumentRegistry
from docchat.core.retriever import Retriever

ALPHABET = "abcdefghijklmnopqrstuvwxyz"


class KeywordEmbeddings(Embeddings):
    """Letter-frequency vectors: deterministic, offline, similar texts score high."""

    def _vector(self, text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(letter)) for letter in ALPHABET] + [1.0]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._vector(text)

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embed_documents(texts)

    async def aembed_query(self, text: str) -> list[float]:
        return self.embed_query(text)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker]:
    """In-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield get_async_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def vector_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex(KeywordEmbeddings())


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry(
    session_factory: async_sessionmaker,
    vector_index: InMemoryVectorIndex,
    clock: ManualClock,
) -> DocumentRegistry:
    return DocumentRegistry(
        session_factory=session_factory,
        vector_index=vector_index,
        sync_interval_seconds=300.0,
        purge_orphans=True,
        clock=clock,
    )


@pytest.fixture
def embedding_client() -> EmbeddingClient:
    return EmbeddingClient(KeywordEmbeddings(), model_id="fake-embedding", dimension=27)


@pytest.fixture
def chat_model() -> FakeListChatModel:
    return FakeListChatModel(responses=["Here is what I found."])


@pytest.fixture
def llm_client(chat_model: FakeListChatModel) -> LanguageModelClient:
    return LanguageModelClient(chat_model, model_id="fake-llm", timeout_seconds=5.0)


@pytest.fixture
def document_service(
    registry: DocumentRegistry,
    embedding_client: EmbeddingClient,
    vector_index: InMemoryVectorIndex,
) -> DocumentService:
    return DocumentService(
        registry=registry,
        chunker=Chunker(chunk_size=100, chunk_overlap=20),
        embedding_client=embedding_client,
        vector_index=vector_index,
        default_namespace="default",
    )


@pytest.fixture
def chat_service(
    registry: DocumentRegistry,
    embedding_client: EmbeddingClient,
    vector_index: InMemoryVectorIndex,
    llm_client: LanguageModelClient,
) -> ChatService:
    return ChatService(
        retriever=Retriever(embedding_client, vector_index, top_k=5),
        assembler=ContextAssembler(),
        orchestrator=GenerationOrchestrator(llm_client, history_window=20),
        registry=registry,
        default_namespace="default",
    )
