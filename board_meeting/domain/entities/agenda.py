from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


class AgendaStatus:
    DRAFT = "DRAFT"
    DAPAT_DILANJUTKAN = "DAPAT_DILANJUTKAN"
    DIJADWALKAN = "DIJADWALKAN"
    DITUNDA = "DITUNDA"
    RAPAT_SELESAI = "RAPAT_SELESAI"
    DIBATALKAN = "DIBATALKAN"
    # Legacy spellings still present in older rows
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    SCHEDULED = "SCHEDULED"
    SELESAI = "SELESAI"

    COMPLETED_ALIASES = frozenset({RAPAT_SELESAI, COMPLETED})
    CANCELLED_ALIASES = frozenset({DIBATALKAN, CANCELLED})
    SCHEDULED_ALIASES = frozenset({DIJADWALKAN, SCHEDULED})
    # Rows in these states can no longer be edited through the proposal forms
    LOCKED = frozenset({DIJADWALKAN, SELESAI, RAPAT_SELESAI})


class MeetingStatus:
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MeetingType:
    RADIR = "RADIR"
    RAKORDIR = "RAKORDIR"
    KEPDIR_SIRKULER = "KEPDIR_SIRKULER"

    ALL = (RADIR, RAKORDIR, KEPDIR_SIRKULER)


class MonevStatus:
    ON_PROGRESS = "ON_PROGRESS"
    DONE = "DONE"


class AttendanceStatus:
    HADIR = "Hadir"
    TIDAK_HADIR = "Tidak Hadir"
    KUASA = "Kuasa"

    COUNTED = frozenset({HADIR, TIDAK_HADIR, KUASA})


# Form field name -> ORM attribute
RADIR_FILE_FIELDS: dict[str, str] = {
    "legalReview": "legal_review",
    "riskReview": "risk_review",
    "complianceReview": "compliance_review",
    "regulationReview": "regulation_review",
    "recommendationNote": "recommendation_note",
    "proposalNote": "proposal_note",
    "presentationMaterial": "presentation_material",
}

RAKORDIR_FILE_FIELDS: dict[str, str] = {
    "proposalNote": "proposal_note",
    "presentationMaterial": "presentation_material",
}

KEPDIR_FILE_FIELDS: dict[str, str] = {
    "kepdirSirkulerDoc": "kepdir_sirkuler_doc",
    "grcDoc": "grc_doc",
}

# Every column holding a single storage path
ALL_FILE_COLUMNS: tuple[str, ...] = (
    "legal_review",
    "risk_review",
    "compliance_review",
    "regulation_review",
    "recommendation_note",
    "proposal_note",
    "presentation_material",
    "kepdir_sirkuler_doc",
    "grc_doc",
    "risalah_ttd",
    "petikan_risalah",
)

# Long names as stored in attendance_data -> short chart labels. Order is the chart order.
DIRECTORS_MAP: dict[str, str] = {
    "DIREKTUR UTAMA (DIRUT)": "DIRUT",
    "DIREKTUR KEUANGAN (DIR KEU)": "DIR KEU",
    "DIREKTUR DISTRIBUSI (DIR DIST)": "DIR DIST",
    "DIREKTUR MANAJEMEN RISIKO (DIR MRO)": "DIR MRO",
    "DIREKTUR RETAIL DAN NIAGA (DIR RETAIL)": "DIR RETAIL",
    "DIREKTUR MANAJEMEN PEMBANGKITAN (DIR MKIT)": "DIR MKIT",
    "DIREKTUR LEGAL DAN MANAJEMEN HUMAN CAPITAL (DIR LHC)": "DIR LHC",
    "DIREKTUR TRANSMISI DAN PERENCANAAN SISTEM (DIR TRANS)": "DIR TRANS",
    "DIREKTUR TEKNOLOGI, ENGINEERING, DAN KEBERLANJUTAN (DIR TNK)": "DIR TNK",
    "DIREKTUR MANAJEMEN PROYEK DAN ENERGI BARU TERBARUKAN (DIR MPRO)": "DIR MPRO",
    "DIREKTUR PERENCANAAN KORPORAT DAN PENGEMBANGAN BISNIS (DIR RENBANG)": "DIR RENBANG",
}


@dataclass(frozen=True)
class DateRange:
    """Inclusive day range used by dashboard filters."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("start date must not be after end date")

    @property
    def lower_bound(self) -> datetime:
        return datetime.combine(self.start, time.min)

    @property
    def upper_bound(self) -> datetime:
        return datetime.combine(self.end, time.max)


@dataclass(frozen=True)
class SessionKey:
    """A meeting session: every agenda sharing number and year."""

    meeting_number: str
    meeting_year: str

    def __post_init__(self):
        if not self.meeting_number or not self.meeting_number.strip():
            raise ValueError("meeting number is required")
        if not (len(self.meeting_year) == 4 and self.meeting_year.isdigit()):
            raise ValueError("meeting year must be 4 digits")

    @property
    def label(self) -> str:
        return f"{self.meeting_number}/{self.meeting_year}"


def is_completed(status: Optional[str], meeting_status: Optional[str] = None) -> bool:
    return status in AgendaStatus.COMPLETED_ALIASES or meeting_status == MeetingStatus.COMPLETED


def is_cancelled(status: Optional[str], meeting_status: Optional[str] = None) -> bool:
    return status in AgendaStatus.CANCELLED_ALIASES or meeting_status == MeetingStatus.CANCELLED
