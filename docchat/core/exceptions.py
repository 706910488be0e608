"""
Exception hierarchy for DocChat.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

import enum
from typing import Any


class DocChatError(Exception):
    """Base exception for all DocChat errors."""

    kind: str = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocChatError):
    """Raised when caller input is rejected."""

    kind = "validation"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConfigurationError(DocChatError):
    """Raised for invalid configuration such as bad chunk parameters."""

    kind = "configuration"


class DocumentNotFoundError(DocChatError):
    """Raised when a document is unknown to the registry (or owned elsewhere)."""

    kind = "not_found"

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}", details)


class ParsingError(DocChatError):
    """Raised when a PDF cannot be read or has no extractable text."""

    kind = "parsing"

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        self.file_path = file_path
        super().__init__(message, details)


class EmbeddingServiceError(DocChatError):
    """Raised when the embedding service fails (quota, auth, network)."""

    kind = "embedding"


class VectorIndexError(DocChatError):
    """Raised when vector index operations fail."""

    kind = "vector_index"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector index error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete, list)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class GenerationErrorKind(str, enum.Enum):
    """Failure classes of the language model service, used for user messaging."""

    OVERLOAD = "overload"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class GenerationServiceError(DocChatError):
    """Raised when the language model call fails."""

    kind = "generation"

    def __init__(
        self,
        message: str,
        error_kind: GenerationErrorKind = GenerationErrorKind.UNKNOWN,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["error_kind"] = error_kind.value
        self.error_kind = error_kind
        super().__init__(message, details)


class RegistryInconsistencyError(DocChatError):
    """Raised by resync when registry and vector index cannot be reconciled."""

    kind = "registry_inconsistency"

    def __init__(
        self,
        message: str,
        namespace: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if namespace is not None:
            details["namespace"] = namespace
        self.namespace = namespace
        super().__init__(message, details)


class PipelineStateError(DocChatError):
    """Raised on an illegal pipeline stage transition."""

    kind = "pipeline_state"
