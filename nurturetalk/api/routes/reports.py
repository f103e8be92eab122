"""PDF report endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ...models.chat import Message
from ...models.report import ReportRequest, ReportResponse, ReportFormat
from ...core.report import select_report_text, build_transcript
from ...services import Services
from ..deps import get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

REPORT_FILENAME = "NurtureTalk-Report.pdf"


def deliver_report(
    messages: List[Message],
    format: ReportFormat,
    summarize: bool,
    services: Services
):
    """
    Build a report and return it in the requested format.

    - pdf: the PDF bytes as a download
    - data_uri: base64 data URI in JSON
    - file: saved under REPORT_DIR, path in JSON

    Raises NothingToReportError when the transcript has no bot answer.
    """
    text = select_report_text(messages)

    if summarize:
        if services.llm is None:
            raise HTTPException(status_code=503, detail="Summaries need a configured language model.")
        try:
            text = services.llm.summarize(build_transcript(messages))
        except Exception:
            logger.exception("Failed to summarize conversation for report")
            raise HTTPException(status_code=502, detail="Failed to generate the PDF report.")

    rendered = services.reports.render(text)

    if format == "pdf":
        return Response(
            content=rendered.data,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{REPORT_FILENAME}"'}
        )
    if format == "data_uri":
        return ReportResponse(format=format, pages=rendered.pages, data_uri=rendered.data_uri())

    path = services.reports.save(rendered)
    return ReportResponse(format=format, pages=rendered.pages, path=str(path))


@router.post("", response_model=None)
def create_report(
    request: ReportRequest,
    services: Services = Depends(get_services)
):
    """Render a report from a transcript sent by the client."""
    return deliver_report(request.messages, request.format, request.summarize, services)
