"""Report models."""

from pydantic import BaseModel
from typing import Optional, List, Literal

from .chat import Message


ReportFormat = Literal["pdf", "data_uri", "file"]


class ReportRequest(BaseModel):
    """Build a report from a transcript."""
    messages: List[Message]
    format: ReportFormat = "pdf"
    summarize: bool = False


class ReportResponse(BaseModel):
    """Report delivered as a data URI or a saved file."""
    format: ReportFormat
    pages: int
    data_uri: Optional[str] = None
    path: Optional[str] = None
