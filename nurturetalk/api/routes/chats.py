"""Chat session endpoints."""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from ...errors import VectorStoreError
from ...models.chat import (
    Chat, ChatSummary, ChatMessageRequest, ChatTurnResponse,
    DeleteChatResponse, Message, RenameRequest,
)
from ...models.report import ReportFormat
from ...core.chat_store import ChatStore
from ...services import Services
from ..deps import get_chats, get_services
from .chat import to_response
from .reports import deliver_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post("", response_model=Chat, status_code=201)
def new_chat(chats: ChatStore = Depends(get_chats)):
    """Start a new chat and make it active."""
    return chats.create()


@router.get("", response_model=List[ChatSummary])
def list_chats(chats: ChatStore = Depends(get_chats)):
    """List chats, newest first."""
    active = chats.active_chat_id
    return [
        ChatSummary(
            id=c.id,
            title=c.title,
            message_count=len(c.messages),
            active=c.id == active
        )
        for c in chats.list()
    ]


@router.get("/active", response_model=Chat)
def active_chat(chats: ChatStore = Depends(get_chats)):
    """Active chat; one is created when the store is empty."""
    return chats.ensure_active()


@router.get("/{chat_id}", response_model=Chat)
def get_chat(chat_id: str, chats: ChatStore = Depends(get_chats)):
    """Get chat by ID."""
    return chats.get(chat_id)


@router.post("/{chat_id}/select", response_model=Chat)
def select_chat(chat_id: str, chats: ChatStore = Depends(get_chats)):
    """Make a chat the active one."""
    return chats.select(chat_id)


@router.patch("/{chat_id}", response_model=Chat)
def rename_chat(chat_id: str, request: RenameRequest, chats: ChatStore = Depends(get_chats)):
    return chats.rename(chat_id, request.title)


@router.delete("/{chat_id}", response_model=DeleteChatResponse)
def delete_chat(chat_id: str, services: Services = Depends(get_services)):
    """
    Delete a chat.

    With CASCADE_DELETE_MEMORY the conversation's memory records are removed
    too; a failed cascade is logged and the chat is still deleted.
    """
    result = services.chats.delete(chat_id)

    memory_deleted = False
    if services.settings.cascade_delete_memory and services.memory is not None:
        try:
            services.memory.forget(chat_id)
            memory_deleted = True
        except VectorStoreError:
            logger.warning("Chat %s deleted but its memory records remain", chat_id)

    return DeleteChatResponse(memory_deleted=memory_deleted, **result)


@router.post("/{chat_id}/messages", response_model=ChatTurnResponse)
def post_message(
    chat_id: str,
    request: ChatMessageRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services)
):
    """
    Send a user message to a stored chat.

    The reply is appended to the transcript together with the user message
    only when the flow succeeded; otherwise the transcript is left as it was
    and the fixed message is returned in ``error``.
    """
    chat = services.chats.get(chat_id)
    flow = services.flow

    answer = flow.answer(
        query=request.query,
        conversation_id=chat.id,
        history=chat.messages
    )
    reply = to_response(answer)

    if not answer.ok:
        return ChatTurnResponse(chat=chat, reply=reply, error=reply.response)

    updated = services.chats.append_messages(chat.id, [
        Message(role="user", content=request.query),
        Message(role="bot", content=answer.response),
    ])
    flow.write_back(request.query, answer, chat.id, background_tasks)
    return ChatTurnResponse(chat=updated, reply=reply)


@router.get("/{chat_id}/report", response_model=None)
def chat_report(
    chat_id: str,
    format: ReportFormat = "pdf",
    summarize: bool = False,
    services: Services = Depends(get_services)
):
    """Report from the chat's latest bot answer (or an LLM summary)."""
    chat = services.chats.get(chat_id)
    return deliver_report(chat.messages, format, summarize, services)
