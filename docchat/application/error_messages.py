"""
User-facing error messages.

Maps error kinds to short, friendly text with a retry suggestion.

Dependencies: docchat.core.exceptions
System role: Error presentation for the HTTP layer
"""

from docchat.core.exceptions import DocChatError, GenerationErrorKind, GenerationServiceError

GENERATION_MESSAGES: dict[GenerationErrorKind, str] = {
    GenerationErrorKind.OVERLOAD: "The AI service is currently overloaded. Please try again in a few moments.",
    GenerationErrorKind.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
    GenerationErrorKind.AUTH: "Authentication failed. Please check your API keys.",
    GenerationErrorKind.NOT_FOUND: "Resource not found. Please check your input.",
    GenerationErrorKind.NETWORK: "Network error. Please check your connection and try again.",
    GenerationErrorKind.TIMEOUT: "Request timed out. Please try again.",
}

KIND_MESSAGES: dict[str, str] = {
    "embedding": "The embedding service is unavailable. Please try again shortly.",
    "vector_index": "The document index is unavailable. Please try again shortly.",
    "registry_inconsistency": "The document index could not be reconciled. Please try again later.",
    "configuration": "The service is misconfigured. Please contact the administrator.",
}

DEFAULT_MESSAGE = "An error occurred. Please try again."


def friendly_error_message(error: BaseException) -> str:
    """Return the message shown to users for an error."""
    if isinstance(error, GenerationServiceError):
        return GENERATION_MESSAGES.get(error.error_kind, DEFAULT_MESSAGE)
    if isinstance(error, DocChatError):
        # Validation, not-found and parsing messages are already user-facing.
        return KIND_MESSAGES.get(error.kind, error.message)
    return DEFAULT_MESSAGE
