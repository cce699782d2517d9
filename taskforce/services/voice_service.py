"""
Voice-to-task extraction.

One best-effort advisory call turns a spoken request into task fields.
Anything that goes wrong yields the defaults with the transcript as the
description, so a manager can always edit and submit the result.
"""

import logging
from typing import Any, List, Optional

from taskforce.assignment.prompts import VOICE_EXTRACTION_PROMPT
from taskforce.assignment.response_parser import parse_json_object
from taskforce.clients.llm_client import AdvisoryClient
from taskforce.config.settings import Settings, get_settings
from taskforce.errors import AdvisoryUnavailable, MalformedResponse
from taskforce.models.outputs import ExtractedTaskFields
from taskforce.models.task import Priority

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Task"
DEFAULT_TOTAL_HOURS = 40


def _coerce_skills(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(s).strip() for s in value if str(s).strip()]


def _coerce_priority(value: Any) -> Priority:
    try:
        return Priority(str(value).strip().lower())
    except ValueError:
        return Priority.MEDIUM


def _coerce_hours(value: Any) -> float:
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TOTAL_HOURS
    return hours if hours > 0 else DEFAULT_TOTAL_HOURS


class VoiceExtractionService:
    """Extracts title, description, skills, priority and hours from a transcript."""

    def __init__(
        self,
        advisory_client: Optional[AdvisoryClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.advisory_client = advisory_client
        self.temperature = settings.llm_extraction_temperature

    def extract(self, voice_text: str) -> ExtractedTaskFields:
        """
        Extract task fields from a voice transcript.

        Raises:
            ValueError: if the transcript is blank
        """
        text = (voice_text or "").strip()
        if not text:
            raise ValueError("Voice text is required")

        if self.advisory_client is None:
            return ExtractedTaskFields(description=text)

        try:
            raw = self.advisory_client.complete(
                VOICE_EXTRACTION_PROMPT.format(voice_text=text),
                temperature=self.temperature,
            )
            data = parse_json_object(raw)
        except (AdvisoryUnavailable, MalformedResponse) as e:
            logger.error(f"Voice extraction failed, returning transcript: {e}")
            return ExtractedTaskFields(description=text)

        fields = ExtractedTaskFields(
            title=str(data.get("title") or DEFAULT_TITLE),
            description=str(data.get("description") or text),
            skills=_coerce_skills(data.get("skills")),
            priority=_coerce_priority(data.get("priority")),
            total_hours=_coerce_hours(data.get("totalHours")),
        )
        logger.info(f"Extracted task '{fields.title}' ({len(fields.skills)} skill(s))")
        return fields
