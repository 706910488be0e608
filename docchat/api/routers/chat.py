"""
Chat API endpoints.

Routes:
- POST /chat - Answer a question from the namespace's documents

Dependencies: docchat.application.services.chat_service
System role: Chat messaging HTTP API
"""

from fastapi import APIRouter, Depends

from docchat.api.deps import get_chat_service
from docchat.application.services.chat_service import ChatService
from docchat.models.requests import ChatRequest, ChatResponse

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Send a chat message with prior history; errors are rendered by the app's handler."""
    result = await chat_service.ask(
        request.message,
        namespace=request.namespace,
        history=request.history,
    )
    return ChatResponse(answer=result.answer, matches=result.matches)
