from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ReasonIn(BaseModel):
    reason: str = Field(..., description="Cancellation or postponement reason (min. 5 characters)")


class BulkDeleteIn(BaseModel):
    ids: List[str] = Field(default_factory=list, description="Agenda IDs to delete")


class ScheduleIn(BaseModel):
    """Meeting schedule for one agenda"""
    agenda_id: str = Field(..., description="Agenda ID")
    execution_date: str = Field(..., description="Meeting date (YYYY-MM-DD)")
    start_time: str = Field(..., description="Start time (HH:MM)")
    end_time: Optional[str] = Field(default=None, description="End time, defaults to 'Selesai'")
    meeting_method: Optional[str] = Field(default=None, description="OFFLINE, ONLINE or HYBRID")
    location: Optional[str] = Field(default=None, description="Meeting room")
    link: Optional[str] = Field(default=None, description="Online meeting link")


class BulkScheduleIn(BaseModel):
    items: List[ScheduleIn] = Field(default_factory=list)


class StartMeetingIn(BaseModel):
    agenda_ids: List[str] = Field(..., description="Agendas discussed in this session")
    meeting_number: str = Field(..., description="Session number")
    meeting_year: str = Field(..., description="Session year (4 digits)")


class MinutesIn(BaseModel):
    """Minutes of one agenda"""
    agenda_id: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    meeting_location: Optional[str] = None
    pimpinan_rapat: List[Dict[str, Any]] = Field(default_factory=list, description="Chair options {value, label}")
    attendance_data: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Attendance keyed by director name: {status, reason?, proxy?}"
    )
    guest_participants: List[Dict[str, Any]] = Field(default_factory=list, description="Guests {name, position}")
    executive_summary: Optional[str] = None
    considerations: Optional[str] = None
    risalah_body: Optional[str] = None
    meeting_decisions: List[Dict[str, Any]] = Field(default_factory=list, description="Decision items {id?, text}")
    arahan_direksi: List[Dict[str, Any]] = Field(default_factory=list, description="Directive items {id?, text}")
    dissenting_opinion: Optional[str] = None


class MinutesBatchIn(BaseModel):
    items: List[MinutesIn] = Field(default_factory=list)


class FinishMeetingIn(BaseModel):
    meeting_number: str
    meeting_year: str
    meeting_type: Optional[str] = Field(default=None, description="Restrict to one meeting type")


class LoginIn(BaseModel):
    email: str
    password: str
    totp_code: Optional[str] = Field(default=None, description="6-digit TOTP code when 2FA is enabled")


class TotpCodeIn(BaseModel):
    code: str = Field(..., description="6-digit TOTP code")
