"""Fills the Word minutes templates (Jinja tags, rendered by docxtpl)."""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from docxtpl import DocxTemplate, Listing

from board_meeting.domain.entities.agenda import MeetingType
from board_meeting.infrastructure.config.settings import get_settings

logger = logging.getLogger(__name__)


def with_line_breaks(value: Any) -> Any:
    """Wrap multi-line strings in Listing so every line starts a new line in Word."""
    if isinstance(value, str):
        return Listing(value) if "\n" in value else value
    if isinstance(value, dict):
        return {k: with_line_breaks(v) for k, v in value.items()}
    if isinstance(value, list):
        return [with_line_breaks(v) for v in value]
    return value


class MinutesRenderer:
    def __init__(self, templates: Optional[Dict[str, str]] = None):
        if templates is None:
            settings = get_settings()
            templates = {
                MeetingType.RADIR: settings.radir_template_path,
                MeetingType.RAKORDIR: settings.rakordir_template_path,
            }
        self.templates = templates

    def template_path(self, meeting_type: str) -> Path:
        path = self.templates.get(meeting_type)
        if not path or not Path(path).is_file():
            raise FileNotFoundError(f"Template {meeting_type} tidak ditemukan")
        return Path(path)

    def render(self, meeting_type: str, context: Dict[str, Any]) -> bytes:
        path = self.template_path(meeting_type)
        doc = DocxTemplate(str(path))
        # values are plain text; autoescape keeps "&" and "<" from breaking the XML
        doc.render(with_line_breaks(context), autoescape=True)
        buffer = io.BytesIO()
        doc.save(buffer)
        logger.debug("[minutes-renderer] %s rendered from %s", meeting_type, path.name)
        return buffer.getvalue()
