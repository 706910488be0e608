"""
Chat service.

Runs one question through Retriever -> ContextAssembler -> GenerationOrchestrator
while tracking the request's pipeline stage. Any stage failure fails the whole
request; no partial answer is returned.

Dependencies: docchat.core
System role: Query path orchestration
"""

import logging
import uuid
from collections.abc import Sequence

from docchat.core.context_assembler import ContextAssembler
from docchat.core.exceptions import ValidationError
from docchat.core.generation import GenerationOrchestrator
from docchat.core.pipeline import PipelineRun, PipelineStage
from docchat.core.registry import DocumentRegistry
from docchat.core.retriever import Retriever
from docchat.models.chat import AskResult, ConversationTurn
from docchat.models.document import DocumentStatus

logger = logging.getLogger(__name__)


class ChatService:
    """Answers questions over a namespace's documents."""

    def __init__(
        self,
        retriever: Retriever,
        assembler: ContextAssembler,
        orchestrator: GenerationOrchestrator,
        registry: DocumentRegistry,
        default_namespace: str = "default",
    ) -> None:
        self.retriever = retriever
        self.assembler = assembler
        self.orchestrator = orchestrator
        self.registry = registry
        self.default_namespace = default_namespace

    async def ask(
        self,
        query: str,
        namespace: str | None = None,
        history: Sequence[ConversationTurn] = (),
    ) -> AskResult:
        """
        Answer a question.

        Flow:
        1. Retrieve ranked matches for the query
        2. Assemble context from matches, history and the completed-document catalog
        3. Generate the answer with validated history

        Args:
            query: User question
            namespace: Namespace to search (default namespace if None)
            history: Prior turns, oldest first

        Returns:
            AskResult: Answer, matches and the assembled context

        Raises:
            ValidationError: Blank query
            EmbeddingServiceError, VectorIndexError, GenerationServiceError: Stage failures
        """
        if not query or not query.strip():
            raise ValidationError("Message is required", field="message")
        namespace = namespace or self.default_namespace
        run = PipelineRun(request_id=uuid.uuid4().hex[:8])
        logger.info(
            f"{__name__}:ask - START request={run.request_id} query='{query[:80]}'",
            extra={"namespace": namespace, "history_turns": len(history)},
        )

        try:
            run.advance(PipelineStage.RETRIEVING)
            matches = await self.retriever.retrieve(query, namespace)

            run.advance(PipelineStage.ASSEMBLING)
            catalog = await self.registry.list(namespace, status=DocumentStatus.COMPLETED)
            context = self.assembler.assemble(query, matches, history, catalog)

            run.advance(PipelineStage.GENERATING)
            answer = await self.orchestrator.generate(context, history)

            run.advance(PipelineStage.DONE)
        except Exception as e:
            run.fail(e)
            raise

        logger.info(
            f"{__name__}:ask - Completed request={run.request_id}",
            extra={
                "namespace": namespace,
                "matches": len(matches),
                "durations_ms": {k.value: v for k, v in run.durations_ms.items()},
            },
        )
        return AskResult(answer=answer, matches=matches, context=context)
