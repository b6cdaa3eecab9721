"""
API Schemas for Tracker app.
"""
from typing import Any, Dict, Optional
from uuid import UUID
from datetime import date, datetime
from ninja import Schema


class JobApplicationIn(Schema):
    company_name: str
    job_title: str
    date_applied: date
    application_status: str = 'applied'
    job_link: Optional[str] = None
    interview_stage: Optional[str] = None
    recruiter_name: Optional[str] = None
    mentee_notes: Optional[str] = None


class JobApplicationUpdate(Schema):
    """Partial update by the owning mentee."""
    company_name: Optional[str] = None
    job_title: Optional[str] = None
    date_applied: Optional[date] = None
    application_status: Optional[str] = None
    job_link: Optional[str] = None
    interview_stage: Optional[str] = None
    recruiter_name: Optional[str] = None
    mentee_notes: Optional[str] = None


class CoachApplicationUpdate(Schema):
    coach_notes: Optional[str] = None
    application_status: Optional[str] = None
    interview_stage: Optional[str] = None


class JobApplicationOut(Schema):
    id: UUID
    mentee_id: UUID
    company_name: str
    job_title: str
    job_link: str
    date_applied: date
    application_status: str
    interview_stage: str
    recruiter_name: str
    coach_notes: str
    mentee_notes: str
    created_at: datetime
    updated_at: datetime


class CoachJobApplicationOut(JobApplicationOut):
    mentee_name: str
    mentee_email: str

    @staticmethod
    def resolve_mentee_name(obj):
        return obj.mentee.full_name

    @staticmethod
    def resolve_mentee_email(obj):
        return obj.mentee.email


class ApplicationStatsOut(Schema):
    total: int
    applied: int
    interviewed: int
    offered: int
    rejected: int
    withdrawn: int
    this_month: int


# =============================================================================
# Drafts
# =============================================================================

class DraftIn(Schema):
    data: Dict[str, Any]


class DraftOut(Schema):
    application_id: UUID
    data: Dict[str, Any]
    saved_at: datetime
    expires_at: datetime
