"""
Generation orchestrator.

Validates history, renders the assembled context into the user turn and
calls the language model once. The answer is returned unmodified.

Dependencies: docchat.boundary.llm, docchat.core.history
System role: Final stage of the query path
"""

import logging
from collections.abc import Sequence

from docchat.boundary.llm.language_model_client import LanguageModelClient
from docchat.core.context_assembler import ContextAssembler
from docchat.core.history import validate_history
from docchat.models.chat import ConversationTurn
from docchat.models.context import AssembledContext

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Calls the language model with system block, validated history and the new user turn."""

    def __init__(
        self,
        llm_client: LanguageModelClient,
        history_window: int | None = None,
    ) -> None:
        """
        Args:
            llm_client: Language model boundary
            history_window: Maximum prior turns passed on; None passes all
        """
        self._llm = llm_client
        self.history_window = history_window

    async def generate(
        self,
        context: AssembledContext,
        history: Sequence[ConversationTurn],
    ) -> str:
        """
        Generate the answer.

        Raises:
            GenerationServiceError: Propagated from the language model, never retried here
        """
        validated = validate_history(history, window=self.history_window)
        logger.info(
            f"{__name__}:generate - Calling language model",
            extra={"raw_turns": len(history), "validated_turns": len(validated)},
        )
        return await self._llm.generate(
            system_text=context.instructions,
            history=validated,
            user_text=ContextAssembler.render(context),
        )
