"""DTOs for the Mentoring app."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class MenteeSummaryDTO:
    """A mentee as seen from their coach's mentee list."""
    id: UUID
    full_name: str
    email: str
    phone: str
    assigned_at: datetime
    overall_progress: int
    completed_modules: int
    total_modules: int
    application_count: int
    notes: Optional[str]


@dataclass(frozen=True)
class CoachSummaryDTO:
    id: UUID
    full_name: str
    email: str
    profile_picture_url: str
    assigned_at: datetime
