"""Conversation memory endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ...errors import VectorStoreError
from ...models.memory import UpsertRequest, SearchRequest, SearchResult, StoreInfo
from ...core.memory_service import MemoryService
from ...services import Services
from ...vector_stores.registry import list_stores
from ..deps import get_memory, get_services

router = APIRouter(prefix="/memory", tags=["memory"])


@router.post("/upsert", status_code=204)
def upsert_memory(
    request: UpsertRequest,
    memory: MemoryService = Depends(get_memory)
):
    """Store turns in a conversation's memory."""
    try:
        memory.upsert(request.documents, request.conversation_id)
    except VectorStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return Response(status_code=204)


@router.post("/search", response_model=List[SearchResult])
def search_memory(
    request: SearchRequest,
    memory: MemoryService = Depends(get_memory)
):
    """Top-K search scoped to one conversation, in backend order."""
    try:
        results, _ = memory.search(
            query=request.query,
            conversation_id=request.conversation_id,
            limit=request.limit
        )
    except VectorStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return results


@router.delete("/{conversation_id}", status_code=204)
def forget_conversation(
    conversation_id: str,
    memory: MemoryService = Depends(get_memory)
):
    """Delete every memory record of a conversation."""
    try:
        memory.forget(conversation_id)
    except VectorStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return Response(status_code=204)


@router.get("/stores", response_model=List[StoreInfo])
async def stores(services: Services = Depends(get_services)):
    """List vector store backends and mark the active one."""
    active = services.memory.backend if services.memory else None
    return [
        StoreInfo(name=name, description=description, active=name == active)
        for name, description in list_stores().items()
    ]
