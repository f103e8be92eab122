"""Chat endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends

from ...models.chat import ChatRequest, ChatResponse
from ...core.rag_flow import RagChatFlow, ChatAnswer
from ..deps import get_flow

router = APIRouter(prefix="/chat", tags=["chat"])


def to_response(answer: ChatAnswer) -> ChatResponse:
    return ChatResponse(
        response=answer.display_text,
        pdf_requested=answer.pdf_requested,
        context=answer.context,
        latency_ms=answer.latency_ms
    )


@router.post("", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    flow: RagChatFlow = Depends(get_flow)
):
    """
    Answer a query using the conversation's memory.

    1. Retrieves the top-K prior turns for the conversation
    2. Passes them as context to the LLM with recent history
    3. Returns the reply; the new turn is written to memory after the
       response is sent

    Failures come back as a fixed message with status 200.
    """
    answer = flow.answer(
        query=request.query,
        conversation_id=request.conversation_id,
        history=request.history
    )
    flow.write_back(request.query, answer, request.conversation_id, background_tasks)
    return to_response(answer)
