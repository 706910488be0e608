"""
Exception handlers.

Renders DocChatError subclasses as {success: false, error: {kind, message}}
with a friendly message and an HTTP status per error kind.

Dependencies: fastapi, docchat.application.error_messages
System role: Error translation for the HTTP layer
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docchat.application.error_messages import friendly_error_message
from docchat.core.exceptions import (
    DocChatError,
    GenerationErrorKind,
    GenerationServiceError,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "validation": 400,
    "not_found": 404,
    "parsing": 422,
    "registry_inconsistency": 409,
    "embedding": 502,
    "vector_index": 502,
    "generation": 502,
}

STATUS_BY_GENERATION_KIND: dict[GenerationErrorKind, int] = {
    GenerationErrorKind.RATE_LIMIT: 429,
    GenerationErrorKind.TIMEOUT: 504,
    GenerationErrorKind.OVERLOAD: 503,
}


def status_for(error: DocChatError) -> int:
    if isinstance(error, GenerationServiceError):
        return STATUS_BY_GENERATION_KIND.get(error.error_kind, 502)
    return STATUS_BY_KIND.get(error.kind, 500)


def error_body(error: DocChatError) -> dict:
    body = {"kind": error.kind, "message": friendly_error_message(error)}
    if isinstance(error, GenerationServiceError):
        body["reason"] = error.error_kind.value
    return {"success": False, "error": body}


async def docchat_error_handler(request: Request, exc: DocChatError) -> JSONResponse:
    status = status_for(exc)
    log = logger.error if status >= 500 else logger.info
    log(f"{__name__}:docchat_error_handler - {request.method} {request.url.path} -> {status}: {exc}")
    return JSONResponse(status_code=status, content=error_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the DocChatError handler on an app."""
    app.add_exception_handler(DocChatError, docchat_error_handler)
