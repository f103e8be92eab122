"""
RAG chat flow.

One linear pass per user message:

1. search the conversation's memory for the top-K prior turns
2. join the snippets, in the order the store returned them, into a context
3. prompt the LLM with context, recent history and the query
4. hand the new user/bot turn back for write-back to memory

Any failure short-circuits to a fixed message; nothing is retried.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from fastapi import BackgroundTasks

from ..models.chat import Message
from ..models.memory import SearchResult
from .llm_orchestrator import LLMOrchestrator
from .memory_service import MemoryService
from .prompts import PDF_REQUEST_TAG, FALLBACK_MESSAGE, missing_config_message

logger = logging.getLogger(__name__)


@dataclass
class ChatAnswer:
    """Outcome of one pass through the flow."""
    response: str
    ok: bool = True
    context: List[SearchResult] = field(default_factory=list)
    latency_ms: float = 0.0

    @property
    def pdf_requested(self) -> bool:
        return PDF_REQUEST_TAG in self.response

    @property
    def display_text(self) -> str:
        """Response with control tags removed."""
        return self.response.replace(PDF_REQUEST_TAG, "").strip()


def join_context(results: Sequence[SearchResult]) -> str:
    return "\n\n".join(r.page_content for r in results if r.page_content)


class RagChatFlow:
    """Answers NGO questions using conversation memory."""

    def __init__(
        self,
        llm: Optional[LLMOrchestrator],
        memory: Optional[MemoryService] = None,
        missing: Sequence[str] = (),
        await_writes: bool = False
    ):
        self.llm = llm
        self.memory = memory
        self.missing = list(missing)
        self.await_writes = await_writes

    @property
    def configured(self) -> bool:
        return not self.missing and self.llm is not None

    def answer(
        self,
        query: str,
        conversation_id: str,
        history: Optional[List[Message]] = None
    ) -> ChatAnswer:
        """
        Produce a reply for a user query.

        Args:
            query: User message
            conversation_id: Conversation whose memory is searched
            history: Recent transcript, oldest first

        Returns:
            ChatAnswer; ``ok`` is False when a fixed message was substituted
        """
        if not self.configured:
            logger.error("Chat request rejected, missing configuration: %s", self.missing)
            return ChatAnswer(response=missing_config_message(self.missing), ok=False)

        start = time.perf_counter()
        try:
            results: List[SearchResult] = []
            if self.memory is not None:
                results, _ = self.memory.search(query, conversation_id)

            response = self.llm.chat(
                query=query,
                context=join_context(results),
                history=[m.model_dump() for m in (history or [])]
            )
        except Exception:
            logger.exception("Error getting chatbot response for conversation=%s", conversation_id)
            return ChatAnswer(response=FALLBACK_MESSAGE, ok=False)

        return ChatAnswer(
            response=response,
            context=results,
            latency_ms=(time.perf_counter() - start) * 1000
        )

    def remember(self, query: str, answer: ChatAnswer, conversation_id: str) -> bool:
        """Store the turn in memory. Best effort."""
        if self.memory is None or not answer.ok:
            return False
        return self.memory.remember_turn(query, answer.display_text, conversation_id)

    def write_back(
        self,
        query: str,
        answer: ChatAnswer,
        conversation_id: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> None:
        """
        Schedule the memory write for a finished turn.

        Runs as a background task after the response is sent unless
        AWAIT_MEMORY_WRITES is set or no task queue is available. A follow-up
        query may be searched before the write lands.
        """
        if self.memory is None or not answer.ok:
            return
        if self.await_writes or background_tasks is None:
            self.remember(query, answer, conversation_id)
        else:
            background_tasks.add_task(self.remember, query, answer, conversation_id)
