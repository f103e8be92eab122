"""Shared dependencies for API routes."""

from fastapi import HTTPException, Request

from ..errors import ConfigurationError
from ..core.chat_store import ChatStore
from ..core.memory_service import MemoryService
from ..core.rag_flow import RagChatFlow
from ..services import Services


def get_services(request: Request) -> Services:
    """Dependency: services built at startup."""
    return request.app.state.services


def get_flow(request: Request) -> RagChatFlow:
    """Dependency: get RAG chat flow."""
    return get_services(request).flow


def get_chats(request: Request) -> ChatStore:
    """Dependency: get chat store."""
    return get_services(request).chats


def get_memory(request: Request) -> MemoryService:
    """Dependency: get memory service, 503 when it is not available."""
    services = get_services(request)
    if services.missing:
        raise ConfigurationError(services.missing)
    if services.memory is None:
        raise HTTPException(status_code=503, detail="Conversation memory is disabled (VECTOR_STORE=none).")
    return services.memory
