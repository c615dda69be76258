from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from parka.api.dependencies import get_coach_service
from parka.models.coach import ChatMessage, CoachReply
from parka.models.schemas import ChatRequest, MarkdownReportResponse, ReportRequest
from parka.services.coach_service import CoachService
from parka.utils import pdf_generator
from parka.utils.report_formatting import format_report_as_markdown

router = APIRouter()


@router.post("/coach/chat", response_model=CoachReply)
async def chat(request: ChatRequest, coach: CoachService = Depends(get_coach_service)):
    """
    Answers a message with the AI coach. The reply flags whether it can be
    exported as a report and whether a medical disclaimer should be shown.
    """
    return await coach.ask(request.message)


@router.get("/coach/history", response_model=List[ChatMessage])
async def get_history(coach: CoachService = Depends(get_coach_service)):
    return coach.history


@router.delete("/coach/history", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(coach: CoachService = Depends(get_coach_service)):
    coach.clear_history()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _report_text(request: Optional[ReportRequest], coach: CoachService) -> str:
    if request and request.content is not None:
        return request.content
    return coach.last_reply() or ""


@router.post("/coach/report")
async def generate_report(
        request: Optional[ReportRequest] = None,
        coach: CoachService = Depends(get_coach_service),
):
    """
    Renders the physician report as a PDF document.
    """
    include_charts = request.include_charts if request else True
    content = coach.build_report_content(_report_text(request, coach), include_charts=include_charts)
    pdf_bytes = pdf_generator.render_report(content)

    filename = f"Health_Report_{content.generated_on.strftime('%Y%m%d')}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/coach/report/markdown", response_model=MarkdownReportResponse)
async def generate_markdown_report(
        request: Optional[ReportRequest] = None,
        coach: CoachService = Depends(get_coach_service),
):
    content = coach.build_report_content(_report_text(request, coach), include_charts=False)
    return MarkdownReportResponse(report_markdown=format_report_as_markdown(content))
