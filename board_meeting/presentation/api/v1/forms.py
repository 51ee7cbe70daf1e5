"""Multipart form parsing for the proposal and upload endpoints."""
from __future__ import annotations

import json
import logging
from typing import Iterable, List, Optional

from starlette.datastructures import FormData, UploadFile

from board_meeting.application.common import ProposalInput, UploadedFile

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "on", "yes")


async def read_upload(value) -> Optional[UploadedFile]:
    if not isinstance(value, UploadFile):
        return None
    content = await value.read()
    if not content:
        return None
    return UploadedFile(filename=value.filename or "file", content=content, content_type=value.content_type)


def text(form: FormData, key: str) -> Optional[str]:
    value = form.get(key)
    return value if isinstance(value, str) else None


def flag(form: FormData, key: str) -> bool:
    return (text(form, key) or "").strip().lower() in TRUE_VALUES


def string_list(form: FormData, key: str) -> List[str]:
    """Repeated fields, or one field holding a JSON array."""
    values = [v for v in form.getlist(key) if isinstance(v, str)]
    if len(values) == 1 and values[0].lstrip().startswith("["):
        try:
            decoded = json.loads(values[0])
        except ValueError:
            logger.warning("[form] %s is not a JSON array", key)
            return []
        return [str(v) for v in decoded if v is not None] if isinstance(decoded, list) else []
    return [v for v in values if v.strip()]


async def read_proposal_form(form: FormData, file_fields: Iterable[str]) -> ProposalInput:
    files = {}
    delete_files = set()
    for field in file_fields:
        upload = await read_upload(form.get(field))
        if upload is not None:
            files[field] = upload
        if flag(form, f"delete_{field}"):
            delete_files.add(field)

    supporting = []
    for value in form.getlist("supportingDocuments"):
        upload = await read_upload(value)
        if upload is not None:
            supporting.append(upload)

    return ProposalInput(
        title=text(form, "title"),
        urgency=text(form, "urgency"),
        deadline=text(form, "deadline"),
        priority=text(form, "priority"),
        director=text(form, "director"),
        initiator=text(form, "initiator"),
        support=text(form, "support"),
        contact_person=text(form, "contactPerson"),
        position=text(form, "position"),
        phone=text(form, "phone"),
        directors=string_list(form, "directors"),
        initiators=string_list(form, "initiators"),
        not_required_files=string_list(form, "notRequiredFiles") if "notRequiredFiles" in form else None,
        files=files,
        delete_files=delete_files,
        supporting_documents=supporting,
    )
