from datetime import date
from typing import Literal

from pydantic import BaseModel

from studyquota.models.subject import SubjectPriority


QuotaStatus = Literal["not_started", "in_progress", "completed"]


class QuotaItem(BaseModel):
    subject_id: int
    subject_name: str
    units_required: int
    estimated_minutes: float
    priority_tier: SubjectPriority  # display tier, relative to the other selected subjects
    units_completed_this_period: int
    progress_percentage: int
    status: QuotaStatus
    is_completed: bool
    score: float
    allocated_minutes: float
    exam_date: date | None = None
    report_deadline: date | None = None
    days_remaining: int | None = None  # None when no exam date is set
    effective_periods_remaining: int | None = None  # None means no deadline pressure


class PeriodQuota(BaseModel):
    period: Literal["day", "week"]
    period_start: date
    period_end: date  # exclusive
    items: list[QuotaItem]
    total_units: int
    total_minutes: float
    completed_units: int
    is_completed: bool
    active_subjects_count: int


class DailyQuota(PeriodQuota):
    period: Literal["day", "week"] = "day"


class WeeklyQuota(PeriodQuota):
    period: Literal["day", "week"] = "week"
    daily_distribution: dict[date, int]
