from datetime import date
from typing import List

from pydantic import BaseModel, Field

REPORT_TITLE = "Parkinson's Health Report"
REPORT_SOURCE = "Source: Apple Watch & Patient Logs"
REPORT_DISCLAIMER = (
    "This report is generated using AI assistance. Please consult your physician for clinical interpretation."
)


class ReportRow(BaseModel):
    """One line of the 'Health Metrics' table."""
    metric: str
    average: str
    range: str
    unit: str
    trend: str = "Stable"
    status: str = "N/A"
    clinical_note: str = ""


class ReportChart(BaseModel):
    metric: str
    image_base64: str = Field(..., description="PNG trend chart, base64 encoded")


class ReportContent(BaseModel):
    """Structured content of a physician report, rendered to PDF or Markdown."""
    title: str = REPORT_TITLE
    generated_on: date
    source: str = REPORT_SOURCE
    rows: List[ReportRow] = []
    charts: List[ReportChart] = []
    notes: List[str] = Field(default_factory=list, description="Patient notes paragraphs")
    disclaimer: str = REPORT_DISCLAIMER
