"""Chat and message models."""

import uuid
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List

from .memory import Role, SearchResult


NEW_CHAT_TITLE = "New Chat"


class Message(BaseModel):
    """Single chat message. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Chat(BaseModel):
    """A conversation and its transcript."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = NEW_CHAT_TITLE
    messages: List[Message] = []


class ChatSummary(BaseModel):
    """Chat listing entry."""
    id: str
    title: str
    message_count: int
    active: bool = False


class ChatRequest(BaseModel):
    """Chat request scoped to a conversation."""
    query: str = Field(min_length=1)
    conversation_id: str = Field(min_length=1)
    history: List[Message] = []


class ChatResponse(BaseModel):
    """Chat response with the context that was used."""
    response: str
    pdf_requested: bool = False
    context: List[SearchResult] = []
    latency_ms: float = 0.0


class ChatMessageRequest(BaseModel):
    """New user message for a stored chat."""
    query: str = Field(min_length=1)


class ChatTurnResponse(BaseModel):
    """Result of posting a message to a stored chat."""
    chat: Chat
    reply: ChatResponse
    error: Optional[str] = None


class RenameRequest(BaseModel):
    """New title for a chat."""
    title: str = Field(min_length=1, max_length=200)


class DeleteChatResponse(BaseModel):
    """Result of deleting a chat."""
    deleted: str
    active_chat_id: Optional[str] = None
    memory_deleted: bool = False
