"""Shared test fixtures."""

from typing import Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from nurturetalk.config import Settings
from nurturetalk.core.chat_store import ChatStore
from nurturetalk.core.embeddings import HashingEmbedder
from nurturetalk.core.memory_service import MemoryService
from nurturetalk.core.rag_flow import RagChatFlow
from nurturetalk.core.report import ReportGenerator
from nurturetalk.main import create_app
from nurturetalk.services import Services
from nurturetalk.vector_stores.in_memory import InMemoryVectorStore


class StubLLM:
    """Stands in for LLMOrchestrator and records what it was asked."""

    def __init__(self, reply: str = "NGOs rely on diverse funding."):
        self.reply = reply
        self.calls: List[Dict] = []
        self.summaries: List[str] = []
        self.error: Optional[Exception] = None

    def chat(self, query: str, context: str, history: Optional[List[Dict]] = None) -> str:
        self.calls.append({"query": query, "context": context, "history": history or []})
        if self.error:
            raise self.error
        return self.reply

    def summarize(self, transcript: str) -> str:
        self.summaries.append(transcript)
        return f"Summary of {len(transcript.splitlines())} lines"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "_env_file": None,
        "openai_api_key": "sk-test",
        "embedding_provider": "hashing",
        "vector_store": "memory",
        "pinecone_api_key": "",
        "astra_db_application_token": "",
        "astra_db_api_endpoint": "",
        "chat_store_path": tmp_path / "chats.json",
        "report_dir": tmp_path / "reports",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore(embedder=HashingEmbedder())


@pytest.fixture
def memory(store) -> MemoryService:
    return MemoryService(store, top_k=5)


@pytest.fixture
def llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def services(settings, memory, llm) -> Services:
    """Fully configured services backed by the in-memory store."""
    return Services(
        settings=settings,
        flow=RagChatFlow(llm=llm, memory=memory),
        chats=ChatStore(settings.chat_store_path),
        reports=ReportGenerator(settings.report_dir),
        llm=llm,
        memory=memory,
    )


@pytest.fixture
def unconfigured_services(tmp_path) -> Services:
    """Services as built when OPENAI_API_KEY is absent."""
    s = make_settings(tmp_path, openai_api_key="")
    missing = s.missing_credentials()
    return Services(
        settings=s,
        flow=RagChatFlow(llm=None, memory=None, missing=missing),
        chats=ChatStore(s.chat_store_path),
        reports=ReportGenerator(s.report_dir),
        missing=missing,
    )


@pytest.fixture
async def client(services):
    transport = ASGITransport(app=create_app(services=services))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def unconfigured_client(unconfigured_services):
    transport = ASGITransport(app=create_app(services=unconfigured_services))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
