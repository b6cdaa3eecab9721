from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema


class RecommendationIn(Schema):
    job_title: str
    company_name: str
    job_link: str = ""
    description: str = ""
    week_start_date: Optional[date] = None
    mentee_ids: List[UUID]


class RecommendationOut(Schema):
    id: UUID
    coach_id: UUID
    mentee_id: UUID
    coach_name: str
    mentee_name: str
    job_title: str
    company_name: str
    job_link: str
    description: str
    week_start_date: date
    status: str
    archived: bool
    applied_date: Optional[datetime] = None
    application_stage: str
    created_at: datetime

    @staticmethod
    def resolve_coach_name(obj):
        return obj.coach.full_name

    @staticmethod
    def resolve_mentee_name(obj):
        return obj.mentee.full_name


class GroupedRecommendationsOut(Schema):
    week_start_date: date
    current_week: List[RecommendationOut]
    previous_weeks: List[RecommendationOut]


class MarkAppliedIn(Schema):
    application_stage: Optional[str] = None
