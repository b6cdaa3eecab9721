from typing import List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema, Field


class ModuleProgressOut(Schema):
    id: Optional[UUID] = None
    module_title: str
    progress_percentage: int
    completed: bool
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MyProgressOut(Schema):
    has_real_data: bool
    modules: List[ModuleProgressOut]


class ProgressUpdateIn(Schema):
    module_title: str
    progress_percentage: int
    completed: Optional[bool] = None


class ProgressSummaryOut(Schema):
    mentee_id: UUID
    overall_progress: int
    completed_modules: int
    total_modules: int
    has_real_data: bool


class FeedbackIn(Schema):
    module_title: str
    comments: str
    rating: Optional[int] = Field(None, ge=1, le=5)


class FeedbackOut(Schema):
    id: UUID
    module_title: str
    rating: Optional[int] = None
    comments: str
    created_at: datetime
