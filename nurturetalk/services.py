"""
Service wiring.

Everything the API needs is built once from Settings and attached to the
app. Missing credentials or a vector store that cannot be built do not stop
startup: the chat flow is built in an unconfigured state that answers with
an instructional message instead.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Settings
from .core.chat_store import ChatStore
from .core.embeddings import get_embedder
from .core.llm_orchestrator import LLMOrchestrator
from .core.memory_service import MemoryService
from .core.rag_flow import RagChatFlow
from .core.report import ReportGenerator
from .vector_stores.registry import get_store, needs_embedder

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Explicitly constructed dependencies shared by the routes."""
    settings: Settings
    flow: RagChatFlow
    chats: ChatStore
    reports: ReportGenerator
    llm: Optional[LLMOrchestrator] = None
    memory: Optional[MemoryService] = None
    missing: List[str] = field(default_factory=list)


def build_services(settings: Settings) -> Services:
    """Resolve providers from settings once at startup."""
    missing = settings.missing_credentials()
    llm: Optional[LLMOrchestrator] = None
    memory: Optional[MemoryService] = None

    if missing:
        logger.error(
            "Missing credentials %s; chat will answer with setup instructions", missing
        )
    else:
        llm = LLMOrchestrator(
            api_key=settings.openai_api_key,
            model=settings.llm_model,
            history_window=settings.history_window,
        )
        if settings.memory_enabled:
            try:
                embedder = get_embedder(settings) if needs_embedder(settings) else None
                store = get_store(settings.vector_store, settings, embedder)
            except Exception as e:
                # Unknown backend, missing extra or unreachable index
                logger.exception("Failed to set up vector store '%s'", settings.vector_store)
                missing = [f"a working VECTOR_STORE ({e})"]
                llm = None
            else:
                memory = MemoryService(store, top_k=settings.top_k)
                logger.info("Memory backend: %s", store.name)
        else:
            logger.warning("Memory disabled (VECTOR_STORE=none); answering from history only")

    flow = RagChatFlow(
        llm=llm,
        memory=memory,
        missing=missing,
        await_writes=settings.await_memory_writes,
    )
    return Services(
        settings=settings,
        flow=flow,
        chats=ChatStore(settings.chat_store_path),
        reports=ReportGenerator(settings.report_dir),
        llm=llm,
        memory=memory,
        missing=missing,
    )
