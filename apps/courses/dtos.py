"""DTOs for the Courses app."""
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class ProgressSummaryDTO:
    """Aggregate course progress of one mentee, as shown to coaches."""
    mentee_id: UUID
    overall_progress: int
    completed_modules: int
    total_modules: int
    has_real_data: bool
