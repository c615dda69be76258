from datetime import date
from typing import List, Optional

from parka.models.metrics import HealthMetric
from parka.models.report import ReportContent
from parka.prompts import prompts


def get_metric_status(metric: HealthMetric, value: Optional[float]) -> str:
    """
    Places a value against the metric's usual reference range.
    Returns "Low", "Normal", "High" or "N/A" when there is no value.
    """
    if value is None:
        return "N/A"

    low, high = metric.normal_range
    if value < low:
        return "Low"
    if value > high:
        return "High"
    return "Normal"


def format_metric_value(value: float, metric: HealthMetric) -> str:
    digits = 1 if metric in (HealthMetric.HEART_RATE, HealthMetric.RESPIRATORY_RATE, HealthMetric.BALANCE) else 2
    return f"{value:.{digits}f}"


def format_range(minimum: float, maximum: float, metric: HealthMetric) -> str:
    return f"{format_metric_value(minimum, metric)}-{format_metric_value(maximum, metric)}"


def clean_content(content: str) -> str:
    """Removes Markdown emphasis markers from generated text."""
    return content.replace("**", "").replace("*", "").strip()


def split_paragraphs(content: str) -> List[str]:
    return [p.strip() for p in content.split("\n\n") if p.strip()]


def create_default_report(report_date: date, mood_lines: List[str], adherence_line: str, days: int = 7) -> str:
    """Narrative used in place of the AI text when none is available."""
    return prompts.DEFAULT_REPORT_TEMPLATE.format(
        report_date=report_date.strftime("%B %d, %Y"),
        days=days,
        mood_lines="\n".join(f"• {line}" for line in mood_lines) or "• No mood entries were logged.",
        adherence_line=adherence_line,
    ).strip()


def format_report_as_markdown(content: ReportContent) -> str:
    """Assembles the Markdown rendition of a report."""
    table_rows = ""
    for row in content.rows:
        table_rows += (
            f"| **{row.metric}** | {row.average} | {row.range} | {row.unit} | {row.trend} | {row.status} |"
            f" {row.clinical_note} |\n"
        )

    notes = "\n\n".join(content.notes)

    markdown_report = f"""
# {content.title}

**Generated:** {content.generated_on.strftime("%B %d, %Y")}

{content.source}

---

## Health Metrics

| Health Metric | Average Value | Range | Unit | Trend | Status | Clinical Notes |
| ------------- | ------------- | ----- | ---- | ----- | ------ | -------------- |
{table_rows}
---

## Patient Notes

{notes}

---

**Disclaimer:** {content.disclaimer}
"""
    return markdown_report.strip()
