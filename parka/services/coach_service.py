"""
AI health coach.

Builds a plain-text summary of the user's recent wearable metrics, mood logs
and medication adherence, picks a prompt for the detected intent and sends
it to the language model. The conversation is kept in memory only.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from parka.core.exceptions import InvalidInput, Unavailable
from parka.models.coach import ChatMessage, CoachReply, Intent
from parka.models.medication import AdherenceStatus
from parka.models.report import REPORT_TITLE, ReportChart, ReportContent, ReportRow
from parka.prompts import prompts
from parka.services.health_data import HealthDataService
from parka.services.language_model import LanguageModelClient
from parka.services.medication_scheduler import MedicationScheduler
from parka.utils import pdf_generator
from parka.utils.report_formatting import (
    clean_content,
    create_default_report,
    format_metric_value,
    format_range,
    get_metric_status,
    split_paragraphs,
)

logger = logging.getLogger(__name__)

GREETINGS = {"hi", "hello", "hey", "how are you", "how r u", "hi how are you"}
GENERAL_KEYWORDS = ("weather", "news", "time", "joke")
REPORT_KEYWORDS = ("report", "physician", "doctor", "summary")

REPORT_OFFER_KEYWORDS = ("report", "summary", "observations", "assessment", "analysis")
DISCLAIMER_KEYWORDS = ("symptom", "mood", "medication", "adherence", "assessment", "analysis")


def classify_intent(message: str) -> Intent:
    msg = message.lower().strip()
    if msg in GREETINGS:
        return Intent.GREETING
    if any(keyword in msg for keyword in GENERAL_KEYWORDS):
        return Intent.GENERAL
    if any(keyword in msg for keyword in REPORT_KEYWORDS):
        return Intent.REPORT
    return Intent.QUESTION


def offers_report(content: str) -> bool:
    """True when a reply reads like a report the user may want as a PDF."""
    lowered = content.lower()
    return any(keyword in lowered for keyword in REPORT_OFFER_KEYWORDS)


def needs_disclaimer(content: str) -> bool:
    lowered = content.lower()
    return any(keyword in lowered for keyword in DISCLAIMER_KEYWORDS)


class CoachService:
    def __init__(
            self,
            scheduler: MedicationScheduler,
            health_service: HealthDataService,
            llm: Optional[LanguageModelClient] = None,
            summary_days: int = 7,
    ):
        self.scheduler = scheduler
        self.health_service = health_service
        self.llm = llm
        self.summary_days = summary_days
        self._history: List[ChatMessage] = []

    @property
    def history(self) -> List[ChatMessage]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history = []

    # --- Summary building ---

    def _recent_mood_logs(self):
        cutoff = self.scheduler.now() - timedelta(days=self.summary_days)
        return sorted((log for log in self.scheduler.mood_logs if log.date >= cutoff), key=lambda log: log.date)

    def _mood_lines(self) -> List[str]:
        return [f"{log.date.strftime('%m/%d/%y')}: {log.mood}" for log in self._recent_mood_logs()]

    def _adherence_line(self) -> str:
        summary = self.scheduler.adherence_summary()
        return f"Doses Missed: {summary.missed} out of {summary.total}"

    def build_health_summary(self) -> str:
        """Plain-text digest of the data the coach may talk about."""
        lines = [REPORT_TITLE, f"Generated: {self.scheduler.today().strftime('%B %d, %Y')}", ""]

        for series in self.health_service.all_series():
            if not series.summary.count:
                continue
            metric = series.metric
            lines.append(f"{series.name}:")
            lines.append(f"  Average: {format_metric_value(series.summary.average, metric)} {series.unit}")
            lines.append(
                f"  Range: {format_metric_value(series.summary.minimum, metric)}-"
                f"{format_metric_value(series.summary.maximum, metric)} {series.unit}"
            )
            lines.append(f"  Trend: {series.trend_label}")
            lines.append("")

        mood_lines = self._mood_lines()
        if mood_lines:
            lines.append(f"Mood (Last {self.summary_days} Days):")
            lines.extend(f"  {line}" for line in mood_lines)
            lines.append("")

        entries = self.scheduler.get_entries_for_today()
        if entries:
            lines.append("Medication Adherence:")
            lines.append(f"  {self._adherence_line()}")
            for entry in entries:
                if entry.status is AdherenceStatus.MISSED:
                    lines.append(f"  Missed: {entry.medication_name} at {entry.scheduled_date_time.strftime('%H:%M')}")
            lines.append("")

        lines.append("Source: Apple Watch")
        return "\n".join(lines)

    def build_prompt(self, message: str, intent: Optional[Intent] = None) -> str:
        intent = intent or classify_intent(message)
        if intent == Intent.GREETING:
            return prompts.GREETING_PROMPT_TEMPLATE.format(question=message)
        if intent == Intent.GENERAL:
            return prompts.GENERAL_PROMPT_TEMPLATE.format(question=message)
        health_data = self.build_health_summary()
        if intent == Intent.REPORT:
            return prompts.REPORT_PROMPT_TEMPLATE.format(health_data=health_data, question=message)
        return prompts.QUESTION_PROMPT_TEMPLATE.format(health_data=health_data, question=message)

    # --- Conversation ---

    async def ask(self, message: str) -> CoachReply:
        """
        Sends the user's message to the language model.

        The user turn is recorded even when generation fails; the assistant
        turn is recorded only on success.

        Raises:
            InvalidInput: If the message is empty.
            Unavailable: If no language model is configured.
        """
        if not message or not message.strip():
            raise InvalidInput("Message must not be empty.")
        if self.llm is None:
            raise Unavailable("Language model is not configured. Set GROQ_API_KEY.")

        message = message.strip()
        intent = classify_intent(message)
        self._history.append(ChatMessage(role="user", content=message, created_at=self.scheduler.now()))

        raw = await self.llm.generate(self.build_prompt(message, intent))
        content = clean_content(raw)
        self._history.append(ChatMessage(role="assistant", content=content, created_at=self.scheduler.now()))
        logger.info(f"Coach answered a {intent.value} message ({len(content)} chars).")

        return CoachReply(
            content=content,
            intent=intent,
            offers_report=offers_report(content),
            needs_disclaimer=needs_disclaimer(content),
        )

    def last_reply(self) -> Optional[str]:
        for message in reversed(self._history):
            if message.role == "assistant":
                return message.content
        return None

    # --- Reports ---

    def build_report_content(self, text: Optional[str] = None, include_charts: bool = True) -> ReportContent:
        """
        Collects the metric table, trend charts and patient notes for a report.

        `text` is the narrative for the notes section; when it is empty a
        default narrative built from the logs is used instead.
        """
        rows = []
        charts = []
        for series in self.health_service.all_series():
            if not series.summary.count:
                continue
            metric = series.metric
            rows.append(ReportRow(
                metric=series.name,
                average=format_metric_value(series.summary.average, metric),
                range=format_range(series.summary.minimum, series.summary.maximum, metric),
                unit=series.unit,
                trend=series.trend_label,
                status=get_metric_status(metric, series.summary.average),
                clinical_note=metric.info_text,
            ))
            if include_charts and len(series.points) >= 2:
                charts.append(ReportChart(
                    metric=series.name,
                    image_base64=pdf_generator.generate_trend_chart_base64(
                        labels=[p.date.strftime("%b %d") for p in series.points],
                        data=[p.value for p in series.points],
                        metric_name=series.name,
                        unit=series.unit,
                    ),
                ))

        cleaned = clean_content(text or "")
        if not cleaned:
            cleaned = create_default_report(
                self.scheduler.today(), self._mood_lines(), self._adherence_line(), self.summary_days
            )

        return ReportContent(
            generated_on=self.scheduler.today(),
            rows=rows,
            charts=charts,
            notes=split_paragraphs(cleaned),
        )
