"""Memory record and vector search models."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal


Role = Literal["user", "bot"]


class MemoryDocument(BaseModel):
    """A single conversation turn to be embedded."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def as_text(self) -> str:
        """Text stored in the index for this turn."""
        return f"{self.role}: {self.content}"


class SearchResult(BaseModel):
    """A retrieved memory snippet."""
    model_config = ConfigDict(populate_by_name=True)

    page_content: str = Field(alias="pageContent")
    score: Optional[float] = None
    role: Optional[str] = None
    timestamp: Optional[str] = None


class UpsertRequest(BaseModel):
    """Write turns into a conversation's memory."""
    documents: List[MemoryDocument]
    conversation_id: str = Field(min_length=1)


class SearchRequest(BaseModel):
    """Search a conversation's memory."""
    query: str
    conversation_id: str = Field(min_length=1)
    limit: Optional[int] = Field(default=None, ge=1, le=50)


class StoreInfo(BaseModel):
    """A registered vector store backend."""
    name: str
    description: str
    active: bool = False
