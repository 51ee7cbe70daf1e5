from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column, Date, DateTime, Index, String, Text

from board_meeting.domain.services.json_fields import parse_json_list, parse_json_object, parse_path_list

from ..connection import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class AgendaModel(Base):
    """ORM model for one agenda row (proposal, schedule, minutes and monev)."""

    __tablename__ = "agendas"

    id = Column(String(36), primary_key=True, default=_uuid, comment="Agenda ID")
    title = Column(Text, nullable=False, comment="Agenda title")
    urgency = Column(String(50), nullable=True, comment="Urgency label")
    deadline = Column(DateTime, nullable=True, comment="Requested deadline")
    priority = Column(String(20), nullable=False, default="Low", comment="Priority label")
    director = Column(Text, nullable=False, default="", comment="Initiating director(s)")
    initiator = Column(Text, nullable=False, default="", comment="Initiating unit(s)")
    support = Column(Text, nullable=True, comment="Supporting unit(s)")
    contact_person = Column(Text, nullable=False, default="", comment="Contact person")
    position = Column(Text, nullable=False, default="", comment="Contact person position")
    phone = Column(Text, nullable=False, default="", comment="Contact person phone")

    # storage paths in the attachments bucket
    legal_review = Column(Text, nullable=True, comment="Legal review document path")
    risk_review = Column(Text, nullable=True, comment="Risk review document path")
    compliance_review = Column(Text, nullable=True, comment="Compliance review document path")
    regulation_review = Column(Text, nullable=True, comment="Regulation review document path")
    recommendation_note = Column(Text, nullable=True, comment="Recommendation note path")
    proposal_note = Column(Text, nullable=True, comment="Proposal note path")
    presentation_material = Column(Text, nullable=True, comment="Presentation material path")
    supporting_documents = Column(JSON, nullable=True, default=list, comment="Supporting document paths (array)")
    kepdir_sirkuler_doc = Column(Text, nullable=True, comment="Circular decision document path")
    grc_doc = Column(Text, nullable=True, comment="GRC document path")
    risalah_ttd = Column(Text, nullable=True, comment="Signed minutes path")
    petikan_risalah = Column(Text, nullable=True, comment="Minutes excerpt path")

    not_required_files = Column(JSON, nullable=False, default=list, comment="File fields marked not required (array)")
    status = Column(String(30), nullable=False, default="DRAFT", comment="Workflow status")
    cancellation_reason = Column(Text, nullable=True, comment="Cancellation reason")
    postponement_reason = Column(Text, nullable=True, comment="Postponement reason")

    # logistics
    execution_date = Column(Date, nullable=True, comment="Meeting date")
    start_time = Column(String(10), nullable=True, comment="Start time HH:MM")
    end_time = Column(String(50), nullable=True, default="Selesai", comment="End time or 'Selesai'")
    meeting_method = Column(String(50), nullable=True, comment="OFFLINE, ONLINE or HYBRID")
    meeting_location = Column(Text, nullable=True, comment="Meeting room")
    meeting_link = Column(Text, nullable=True, comment="Online meeting link")
    meeting_type = Column(String(30), nullable=False, default="RADIR", comment="RADIR, RAKORDIR or KEPDIR_SIRKULER")
    meeting_number = Column(String(50), nullable=True, comment="Session number")
    meeting_year = Column(String(4), nullable=True, comment="Session year")
    meeting_status = Column(String(20), nullable=True, default="PENDING", comment="PENDING, SCHEDULED, IN_PROGRESS, COMPLETED, CANCELLED")

    # minutes
    pimpinan_rapat = Column(JSON, nullable=True, default=list, comment="Meeting chair(s) (array of options)")
    attendance_data = Column(JSON, nullable=True, default=dict, comment="Attendance keyed by director name")
    guest_participants = Column(JSON, nullable=True, default=list, comment="Guests (array)")
    executive_summary = Column(Text, nullable=True, comment="Executive summary")
    considerations = Column(Text, nullable=True, comment="Considerations")
    risalah_body = Column(Text, nullable=True, comment="Minutes body")
    meeting_decisions = Column(JSON, nullable=True, default=list, comment="Decision items (array)")
    arahan_direksi = Column(JSON, nullable=True, default=list, comment="Directors' directives (array)")
    dissenting_opinion = Column(Text, nullable=True, comment="Dissenting opinion")
    risalah_group_id = Column(String(36), nullable=True, default=_uuid, comment="Groups agendas minuted together")

    monev_status = Column(String(20), nullable=True, comment="ON_PROGRESS or DONE")

    user_id = Column(String(36), nullable=True, comment="Creator user ID")
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Created at")
    updated_at = Column(DateTime, nullable=False, default=datetime.now, comment="Updated at")

    __table_args__ = (
        Index("idx_agendas_meeting_type", "meeting_type"),
        Index("idx_agendas_status", "status"),
        Index("idx_agendas_updated_at", "updated_at"),
        Index("idx_agendas_session", "meeting_number", "meeting_year"),
    )

    def __repr__(self):
        return f"<AgendaModel(id='{self.id}', type='{self.meeting_type}', status='{self.status}')>"

    # decoded views of the JSON columns
    @property
    def decisions(self) -> list:
        return parse_json_list(self.meeting_decisions, "meeting_decisions")

    @property
    def arahan(self) -> list:
        return parse_json_list(self.arahan_direksi, "arahan_direksi")

    @property
    def attendance(self) -> dict:
        return parse_json_object(self.attendance_data, "attendance_data")

    @property
    def guests(self) -> list:
        return parse_json_list(self.guest_participants, "guest_participants")

    @property
    def chairs(self) -> list:
        return parse_json_list(self.pimpinan_rapat, "pimpinan_rapat")

    @property
    def supporting_paths(self) -> list[str]:
        return parse_path_list(self.supporting_documents, "supporting_documents")

    @property
    def not_required(self) -> list[str]:
        return [str(f) for f in parse_json_list(self.not_required_files, "not_required_files")]

    def to_dict(self) -> Dict[str, Any]:
        def _iso(v: Any) -> Any:
            if isinstance(v, (datetime, date)):
                return v.isoformat()
            return v

        return {
            "id": self.id,
            "title": self.title,
            "urgency": self.urgency,
            "deadline": _iso(self.deadline),
            "priority": self.priority,
            "director": self.director,
            "initiator": self.initiator,
            "support": self.support,
            "contactPerson": self.contact_person,
            "position": self.position,
            "phone": self.phone,
            "legalReview": self.legal_review,
            "riskReview": self.risk_review,
            "complianceReview": self.compliance_review,
            "regulationReview": self.regulation_review,
            "recommendationNote": self.recommendation_note,
            "proposalNote": self.proposal_note,
            "presentationMaterial": self.presentation_material,
            "supportingDocuments": self.supporting_paths,
            "kepdirSirkulerDoc": self.kepdir_sirkuler_doc,
            "grcDoc": self.grc_doc,
            "risalahTtd": self.risalah_ttd,
            "petikanRisalah": self.petikan_risalah,
            "notRequiredFiles": self.not_required,
            "status": self.status,
            "cancellationReason": self.cancellation_reason,
            "postponementReason": self.postponement_reason,
            "executionDate": _iso(self.execution_date),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "meetingMethod": self.meeting_method,
            "meetingLocation": self.meeting_location,
            "meetingLink": self.meeting_link,
            "meetingType": self.meeting_type,
            "meetingNumber": self.meeting_number,
            "meetingYear": self.meeting_year,
            "meetingStatus": self.meeting_status,
            "pimpinanRapat": self.chairs,
            "attendanceData": self.attendance,
            "guestParticipants": self.guests,
            "executiveSummary": self.executive_summary,
            "considerations": self.considerations,
            "risalahBody": self.risalah_body,
            "meetingDecisions": self.decisions,
            "arahanDireksi": self.arahan,
            "dissentingOpinion": self.dissenting_opinion,
            "risalahGroupId": self.risalah_group_id,
            "monevStatus": self.monev_status,
            "userId": self.user_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
