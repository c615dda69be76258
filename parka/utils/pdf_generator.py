import base64
import io
import logging
from typing import List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from jinja2 import Environment, FileSystemLoader, select_autoescape
from xhtml2pdf import pisa

from parka.core.config import settings
from parka.core.exceptions import InvalidInput, RenderFailed
from parka.models.report import ReportContent

logger = logging.getLogger(__name__)

template_loader = FileSystemLoader(searchpath=settings.TEMPLATE_DIRECTORY)
template_env = Environment(loader=template_loader, autoescape=select_autoescape(["html"]))


def validate_report(content: ReportContent) -> None:
    if not content.title or not content.title.strip():
        raise InvalidInput("Report title must not be empty.")
    if not content.rows and not content.notes:
        raise InvalidInput("Report has no sections to render.")


def render_report(content: ReportContent) -> bytes:
    """
    Renders the report template with the given content and converts it to a PDF.

    :param content: The structured report content.
    :return: The PDF document as bytes.
    """
    validate_report(content)

    template = template_env.get_template("report_template.html")
    source_html = template.render(
        report=content,
        generation_date=content.generated_on.strftime("%B %d, %Y"),
    )

    result = io.BytesIO()
    pisa_status = pisa.CreatePDF(source_html, dest=result)
    if pisa_status.err:
        logger.error(f"PDF creation error: {pisa_status.err}")
        raise RenderFailed(f"PDF creation error: {pisa_status.err}")

    pdf_bytes = result.getvalue()
    logger.info(f"Rendered report PDF ({len(pdf_bytes)} bytes, {len(content.rows)} metric rows).")
    return pdf_bytes


def generate_trend_chart_base64(labels: List[str], data: List[float], metric_name: str, unit: str) -> str:
    """
    Generates a trend chart and returns it as a Base64 encoded PNG string.
    """
    fig, ax = plt.subplots(figsize=(8, 3.5))

    ax.plot(labels, data, marker='o', linestyle='-', color='#2F6FDE')

    ax.set_title(f'{metric_name} Trend', fontsize=14, pad=20)
    ax.set_ylabel(unit, fontsize=10, color='gray')
    ax.tick_params(axis='x', colors='gray', rotation=30)
    ax.tick_params(axis='y', colors='gray')

    ax.grid(True, which='both', linestyle='--', linewidth=0.5, color='#CCCCCC')
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)

    fig.tight_layout()

    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100)
    buf.seek(0)
    img_base64 = base64.b64encode(buf.getvalue()).decode('utf-8')
    plt.close(fig)

    return img_base64
