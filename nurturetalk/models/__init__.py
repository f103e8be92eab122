from .memory import MemoryDocument, SearchResult, UpsertRequest, SearchRequest, StoreInfo
from .chat import (
    NEW_CHAT_TITLE,
    Message, Chat, ChatSummary, ChatRequest, ChatResponse,
    ChatMessageRequest, ChatTurnResponse, RenameRequest, DeleteChatResponse,
)
from .report import ReportRequest, ReportResponse

__all__ = [
    "MemoryDocument", "SearchResult", "UpsertRequest", "SearchRequest", "StoreInfo",
    "NEW_CHAT_TITLE",
    "Message", "Chat", "ChatSummary", "ChatRequest", "ChatResponse",
    "ChatMessageRequest", "ChatTurnResponse", "RenameRequest", "DeleteChatResponse",
    "ReportRequest", "ReportResponse",
]
