"""
Language model client over Gemini chat models.

Sends one system block, the validated conversation history and the newly
assembled user turn; returns the generated text unmodified.

Dependencies: langchain_google_genai, langchain_core
System role: Generation boundary for the query path
"""

import asyncio
import logging
from collections.abc import Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from docchat.core.exceptions import GenerationErrorKind, GenerationServiceError
from docchat.models.chat import ConversationRole, ConversationTurn

logger = logging.getLogger(__name__)

# Checked in order; the first kind with a matching marker wins.
ERROR_MARKERS: list[tuple[GenerationErrorKind, tuple[str, ...]]] = [
    (GenerationErrorKind.OVERLOAD, ("503", "service unavailable", "overloaded", "unavailable")),
    (GenerationErrorKind.RATE_LIMIT, ("429", "rate limit", "resource_exhausted", "quota")),
    (GenerationErrorKind.AUTH, ("401", "403", "unauthorized", "authentication", "api key", "permission denied")),
    (GenerationErrorKind.NOT_FOUND, ("404", "not found")),
    (GenerationErrorKind.NETWORK, ("network", "fetch", "econnrefused", "connection")),
    (GenerationErrorKind.TIMEOUT, ("timeout", "timed out", "deadline exceeded")),
]


def classify_generation_error(error: BaseException) -> GenerationErrorKind:
    """Map an upstream exception to the failure class shown to users."""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return GenerationErrorKind.TIMEOUT

    status = getattr(error, "status_code", None) or getattr(error, "code", None)
    text = f"{status or ''} {error}".lower()
    for kind, markers in ERROR_MARKERS:
        if any(marker in text for marker in markers):
            return kind

    if isinstance(error, (ConnectionError, OSError)):
        return GenerationErrorKind.NETWORK
    return GenerationErrorKind.UNKNOWN


def _message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class LanguageModelClient:
    """Thin async wrapper around a LangChain chat model."""

    def __init__(
        self,
        model: BaseChatModel,
        model_id: str,
        timeout_seconds: float | None = 60.0,
    ) -> None:
        """
        Initialize with a chat model.

        Args:
            model: LangChain chat model instance (reused across requests)
            model_id: Model identifier, for logging
            timeout_seconds: Client-side wait limit; the upstream call is not cancelled remotely
        """
        self._model = model
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(
        cls,
        model: str,
        temperature: float,
        max_output_tokens: int,
        timeout_seconds: float | None = 60.0,
        google_api_key: str | None = None,
    ) -> "LanguageModelClient":
        """Build a client backed by ChatGoogleGenerativeAI."""
        kwargs = {
            "model": model,
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
            "max_retries": 0,
        }
        if google_api_key:
            kwargs["google_api_key"] = google_api_key
        logger.info(f"{__name__}:from_settings - Initializing chat model={model}")
        return cls(ChatGoogleGenerativeAI(**kwargs), model_id=model, timeout_seconds=timeout_seconds)

    @staticmethod
    def build_messages(
        system_text: str,
        history: Sequence[ConversationTurn],
        user_text: str,
    ) -> list[BaseMessage]:
        """Build the message list: system block, prior turns, new user turn."""
        messages: list[BaseMessage] = [SystemMessage(content=system_text)]
        for turn in history:
            if turn.role == ConversationRole.USER.value:
                messages.append(HumanMessage(content=turn.content))
            else:
                messages.append(AIMessage(content=turn.content))
        messages.append(HumanMessage(content=user_text))
        return messages

    async def generate(
        self,
        system_text: str,
        history: Sequence[ConversationTurn],
        user_text: str,
    ) -> str:
        """
        Call the model once.

        Args:
            system_text: Instruction block
            history: Validated prior turns (alternating, starting with user)
            user_text: Assembled prompt for the current question

        Returns:
            str: Generated text, unmodified

        Raises:
            GenerationServiceError: On any upstream failure, with its kind classified
        """
        messages = self.build_messages(system_text, history, user_text)
        logger.info(
            f"{__name__}:generate - Invoking model",
            extra={"model": self.model_id, "message_count": len(messages)},
        )
        try:
            if self.timeout_seconds:
                response = await asyncio.wait_for(
                    self._model.ainvoke(messages), timeout=self.timeout_seconds
                )
            else:
                response = await self._model.ainvoke(messages)
        except Exception as e:
            kind = classify_generation_error(e)
            logger.error(f"{__name__}:generate - {type(e).__name__} ({kind.value}): {e}")
            raise GenerationServiceError(
                f"Language model call failed: {e}",
                error_kind=kind,
                details={"model": self.model_id},
            ) from e

        text = _message_text(response)
        logger.info(f"{__name__}:generate - Completed", extra={"answer_len": len(text)})
        return text
