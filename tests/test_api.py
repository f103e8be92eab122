"""API tests over ASGITransport with in-memory services."""

import time

from httpx import ASGITransport, AsyncClient

from nurturetalk.core.prompts import FALLBACK_MESSAGE, PDF_REQUEST_TAG
from nurturetalk.main import create_app
from nurturetalk.services import build_services
from tests.conftest import make_settings


def poll(check, attempts: int = 10, interval: float = 0.05) -> bool:
    """Bounded wait for eventually-consistent memory writes."""
    for _ in range(attempts):
        if check():
            return True
        time.sleep(interval)
    return False


# -- health ------------------------------------------------------------------


async def test_root(client) -> None:
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_health_configured(client) -> None:
    data = (await client.get("/health")).json()
    assert data["status"] == "healthy"
    assert data["vector_store"] == "memory"
    assert data["missing_credentials"] == []


async def test_health_unconfigured(unconfigured_client) -> None:
    data = (await unconfigured_client.get("/health")).json()
    assert data["status"] == "unconfigured"
    assert data["missing_credentials"] == ["OPENAI_API_KEY"]


# -- /chat -------------------------------------------------------------------


async def test_chat_answers_and_remembers_turn(client, llm, store) -> None:
    response = await client.post("/chat", json={
        "query": "How do I register an NGO?",
        "conversation_id": "conv-a",
        "history": [],
    })

    assert response.status_code == 200
    data = response.json()
    assert data["response"] == llm.reply
    assert data["pdf_requested"] is False
    assert poll(lambda: store.count("conv-a") == 2)


async def test_chat_uses_previous_turns_as_context(client, llm) -> None:
    await client.post("/chat", json={"query": "Our NGO works on clean water", "conversation_id": "conv-a"})

    response = await client.post("/chat", json={"query": "clean water projects", "conversation_id": "conv-a"})

    assert response.status_code == 200
    assert "user: Our NGO works on clean water" in llm.calls[-1]["context"]
    assert response.json()["context"][0]["pageContent"].startswith("user: Our NGO works on clean water")


async def test_chat_pdf_request_flag(client, llm) -> None:
    llm.reply = f"Of course! You can download a summary of our conversation below. {PDF_REQUEST_TAG}"

    data = (await client.post("/chat", json={"query": "make a pdf", "conversation_id": "conv-a"})).json()

    assert data["pdf_requested"] is True
    assert PDF_REQUEST_TAG not in data["response"]


async def test_chat_missing_credentials_returns_message(unconfigured_client) -> None:
    response = await unconfigured_client.post("/chat", json={"query": "hi", "conversation_id": "conv-a"})

    assert response.status_code == 200
    assert "OPENAI_API_KEY" in response.json()["response"]


async def test_chat_llm_failure_returns_apology(client, llm, store) -> None:
    llm.error = RuntimeError("boom")

    response = await client.post("/chat", json={"query": "hi", "conversation_id": "conv-a"})

    assert response.status_code == 200
    assert response.json()["response"] == FALLBACK_MESSAGE
    assert store.count("conv-a") == 0


async def test_chat_validates_input(client) -> None:
    response = await client.post("/chat", json={"query": "", "conversation_id": "conv-a"})
    assert response.status_code == 422


# -- /memory -----------------------------------------------------------------


async def test_memory_upsert_then_search(client) -> None:
    response = await client.post("/memory/upsert", json={
        "documents": [{"role": "user", "content": "impact measurement frameworks"}],
        "conversation_id": "conv-a",
    })
    assert response.status_code == 204

    results = (await client.post("/memory/search", json={
        "query": "impact measurement",
        "conversation_id": "conv-a",
    })).json()

    assert results[0]["pageContent"] == "user: impact measurement frameworks"
    assert results[0]["score"] > 0


async def test_memory_isolation(client) -> None:
    await client.post("/memory/upsert", json={
        "documents": [{"role": "user", "content": "donor retention ideas"}],
        "conversation_id": "conv-a",
    })
    await client.post("/memory/upsert", json={
        "documents": [{"role": "bot", "content": "donor thank-you letters"}],
        "conversation_id": "conv-b",
    })

    results = (await client.post("/memory/search", json={
        "query": "donor retention ideas",
        "conversation_id": "conv-b",
    })).json()

    assert [r["pageContent"] for r in results] == ["bot: donor thank-you letters"]


async def test_memory_top_k_is_five(client) -> None:
    await client.post("/memory/upsert", json={
        "documents": [{"role": "user", "content": f"volunteer note {i}"} for i in range(9)],
        "conversation_id": "conv-a",
    })
    results = (await client.post("/memory/search", json={"query": "volunteer", "conversation_id": "conv-a"})).json()
    assert len(results) == 5


async def test_memory_forget(client, store) -> None:
    await client.post("/memory/upsert", json={
        "documents": [{"role": "user", "content": "x"}],
        "conversation_id": "conv-a",
    })
    response = await client.delete("/memory/conv-a")
    assert response.status_code == 204
    assert store.count("conv-a") == 0


async def test_memory_unconfigured_is_503(unconfigured_client) -> None:
    response = await unconfigured_client.post("/memory/search", json={"query": "x", "conversation_id": "c"})
    assert response.status_code == 503
    assert "OPENAI_API_KEY" in response.json()["detail"]


async def test_memory_rejects_unknown_role(client) -> None:
    response = await client.post("/memory/upsert", json={
        "documents": [{"role": "system", "content": "x"}],
        "conversation_id": "conv-a",
    })
    assert response.status_code == 422


async def test_memory_stores_lists_active(client) -> None:
    stores = (await client.get("/memory/stores")).json()
    active = [s["name"] for s in stores if s["active"]]
    assert active == ["memory"]


# -- /chats ------------------------------------------------------------------


async def test_chat_session_flow(client, llm) -> None:
    chat = (await client.post("/chats")).json()
    assert chat["title"] == "New Chat"

    turn = (await client.post(f"/chats/{chat['id']}/messages", json={
        "query": "What are the principles of good NGO governance?",
    })).json()

    assert turn["error"] is None
    assert turn["reply"]["response"] == llm.reply
    assert turn["chat"]["title"] == "What are the principles of goo"
    assert [m["role"] for m in turn["chat"]["messages"]] == ["user", "bot"]

    listing = (await client.get("/chats")).json()
    assert listing[0]["id"] == chat["id"]
    assert listing[0]["active"] is True
    assert listing[0]["message_count"] == 2


async def test_chat_history_is_passed_to_llm(client, llm) -> None:
    chat = (await client.post("/chats")).json()
    await client.post(f"/chats/{chat['id']}/messages", json={"query": "first"})
    await client.post(f"/chats/{chat['id']}/messages", json={"query": "second"})

    assert llm.calls[-1]["history"] == [
        {"role": "user", "content": "first"},
        {"role": "bot", "content": llm.reply},
    ]


async def test_failed_turn_leaves_transcript_unchanged(client, llm) -> None:
    chat = (await client.post("/chats")).json()
    llm.error = RuntimeError("boom")

    turn = (await client.post(f"/chats/{chat['id']}/messages", json={"query": "hi"})).json()

    assert turn["error"] == FALLBACK_MESSAGE
    assert turn["chat"]["messages"] == []


async def test_active_chat_created_on_demand(client) -> None:
    first = (await client.get("/chats/active")).json()
    again = (await client.get("/chats/active")).json()

    assert first["id"] == again["id"]
    assert first["title"] == "New Chat"


async def test_unknown_chat_is_404(client) -> None:
    assert (await client.get("/chats/missing")).status_code == 404
    assert (await client.post("/chats/missing/messages", json={"query": "hi"})).status_code == 404


async def test_select_and_rename(client) -> None:
    first = (await client.post("/chats")).json()
    await client.post("/chats")

    selected = await client.post(f"/chats/{first['id']}/select")
    renamed = await client.patch(f"/chats/{first['id']}", json={"title": "Board meeting prep"})

    assert selected.status_code == 200
    assert renamed.json()["title"] == "Board meeting prep"
    listing = (await client.get("/chats")).json()
    assert [c["active"] for c in listing] == [False, True]


async def test_delete_chat_cascades_to_memory(client, store) -> None:
    chat = (await client.post("/chats")).json()
    await client.post(f"/chats/{chat['id']}/messages", json={"query": "remember me"})
    assert poll(lambda: store.count(chat["id"]) == 2)

    result = (await client.delete(f"/chats/{chat['id']}")).json()

    assert result["deleted"] == chat["id"]
    assert result["memory_deleted"] is True
    assert result["active_chat_id"] != chat["id"]
    assert store.count(chat["id"]) == 0


async def test_delete_chat_without_cascade(services, store) -> None:
    services.settings.cascade_delete_memory = False
    transport = ASGITransport(app=create_app(services=services))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        chat = (await c.post("/chats")).json()
        await c.post(f"/chats/{chat['id']}/messages", json={"query": "keep me"})
        result = (await c.delete(f"/chats/{chat['id']}")).json()

    assert result["memory_deleted"] is False
    assert store.count(chat["id"]) == 2


# -- reports -----------------------------------------------------------------


async def test_report_on_empty_chat_is_refused(client) -> None:
    chat = (await client.post("/chats")).json()

    response = await client.get(f"/chats/{chat['id']}/report")

    assert response.status_code == 422
    assert response.json()["detail"] == "There is no bot response to generate a report from."


async def test_chat_report_pdf(client) -> None:
    chat = (await client.post("/chats")).json()
    await client.post(f"/chats/{chat['id']}/messages", json={"query": "Explain theory of change"})

    response = await client.get(f"/chats/{chat['id']}/report")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


async def test_report_data_uri(client) -> None:
    response = await client.post("/reports", json={
        "messages": [
            {"role": "user", "content": "What is CSR?"},
            {"role": "bot", "content": "Corporate social responsibility."},
        ],
        "format": "data_uri",
    })

    data = response.json()
    assert data["format"] == "data_uri"
    assert data["pages"] == 1
    assert data["data_uri"].startswith("data:application/pdf;base64,")


async def test_report_saved_file(client, settings) -> None:
    response = await client.post("/reports", json={
        "messages": [
            {"role": "user", "content": "q"},
            {"role": "bot", "content": "a"},
        ],
        "format": "file",
    })

    path = response.json()["path"]
    assert path.startswith(str(settings.report_dir))


async def test_report_summary_uses_llm(client, llm) -> None:
    response = await client.post("/reports", json={
        "messages": [
            {"role": "user", "content": "q"},
            {"role": "bot", "content": "a"},
        ],
        "format": "data_uri",
        "summarize": True,
    })

    assert response.status_code == 200
    assert llm.summaries == ["user: q\nbot: a"]


async def test_report_empty_messages_is_refused(client) -> None:
    response = await client.post("/reports", json={"messages": []})
    assert response.status_code == 422


# -- wiring ------------------------------------------------------------------


def test_build_services_with_in_memory_backend(tmp_path) -> None:
    services = build_services(make_settings(tmp_path))

    assert services.missing == []
    assert services.memory.backend == "memory"
    assert services.flow.configured


def test_build_services_without_credentials(tmp_path) -> None:
    services = build_services(make_settings(tmp_path, openai_api_key=""))

    assert services.missing == ["OPENAI_API_KEY"]
    assert services.memory is None
    assert not services.flow.configured


def test_build_services_memory_disabled(tmp_path) -> None:
    services = build_services(make_settings(tmp_path, vector_store="none"))
    assert services.memory is None
    assert services.flow.configured


def test_build_services_unknown_store_degrades(tmp_path) -> None:
    services = build_services(make_settings(tmp_path, vector_store="pinecon"))

    assert services.memory is None
    assert not services.flow.configured
    assert len(services.missing) == 1
    assert "VECTOR_STORE" in services.missing[0]
    assert "pinecon" in services.missing[0]


async def test_unknown_store_answers_with_instructions(tmp_path) -> None:
    services = build_services(make_settings(tmp_path, vector_store="pinecon"))
    transport = ASGITransport(app=create_app(services=services))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        reply = (await c.post("/chat", json={"query": "hi", "conversation_id": "conv-a"})).json()
        health = (await c.get("/health")).json()

    assert "VECTOR_STORE" in reply["response"]
    assert health["status"] == "unconfigured"
