from .chat import router as chat_router
from .memory import router as memory_router
from .chats import router as chats_router
from .reports import router as reports_router

__all__ = ["chat_router", "memory_router", "chats_router", "reports_router"]
