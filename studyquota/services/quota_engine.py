"""Daily and weekly study quota allocation.

Given a snapshot of the learner's subjects, their study settings and a way to
read the progress log, decide how many units each subject should receive for
today or for the current week, which subjects are active at all, and whether
the logged progress already meets each quota.

Every computation is a pure function of its inputs. ``now`` is always
supplied by the caller and the progress log is only read through the
caller's ``ProgressLookup``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Literal, Protocol, Sequence

from studyquota.models.subject import SubjectImportance, SubjectPriority
from studyquota.schemas.quota import DailyQuota, QuotaItem, QuotaStatus, WeeklyQuota
from studyquota.services.study_settings import StudySettings, validate_study_settings

logger = logging.getLogger(__name__)

Period = Literal["day", "week"]

# Effective remaining periods for a subject without an exam date
UNBOUNDED = math.inf

# (max days remaining, points), checked in order
DEADLINE_SCORE_BREAKPOINTS = (
    (3, 100),
    (7, 80),
    (14, 60),
    (30, 40),
    (60, 20),
)

MANUAL_PRIORITY_BONUS = {
    SubjectPriority.LOW: 0,
    SubjectPriority.MEDIUM: 10,
    SubjectPriority.HIGH: 15,
}

# (completion percentage upper bound, points), checked in order
PROGRESS_BONUS_BREAKPOINTS = (
    (30, 15),
    (50, 10),
    (70, 5),
)

IMPORTANCE_BONUS = {
    SubjectImportance.HIGH: 10,
}

TIER_WEIGHT = {
    SubjectPriority.LOW: 1,
    SubjectPriority.MEDIUM: 2,
    SubjectPriority.HIGH: 3,
}

MEDIUM_TIER_SCORE_RATIO = 0.5


@dataclass(frozen=True)
class SubjectSnapshot:
    id: int
    name: str
    total_units: int
    completed_units: int = 0
    exam_date: date | None = None
    report_deadline: date | None = None
    buffer_days: int | None = None
    priority: SubjectPriority = SubjectPriority.MEDIUM
    importance: SubjectImportance = SubjectImportance.MEDIUM

    @classmethod
    def from_model(cls, subject: Any) -> SubjectSnapshot:
        """Copy the fields the engine needs from an ORM row or schema."""
        return cls(
            id=subject.id,
            name=subject.name,
            total_units=subject.total_units,
            completed_units=subject.completed_units or 0,
            exam_date=subject.exam_date,
            report_deadline=subject.report_deadline,
            buffer_days=subject.buffer_days,
            priority=SubjectPriority(subject.priority or SubjectPriority.MEDIUM),
            importance=SubjectImportance(subject.importance or SubjectImportance.MEDIUM),
        )

    @property
    def remaining_units(self) -> int:
        return max(0, self.total_units - self.completed_units)

    @property
    def completion_percentage(self) -> float:
        if self.total_units <= 0:
            return 100.0
        return self.completed_units / self.total_units * 100

    @property
    def is_complete(self) -> bool:
        return self.completed_units >= self.total_units


@dataclass(frozen=True)
class ProgressEntry:
    subject_id: int
    units_completed: int
    record_date: date
    duration_minutes: int | None = None


class ProgressLookup(Protocol):
    def get_records_in_range(
        self, subject_id: int, start: date, end: date
    ) -> Iterable[ProgressEntry]:
        """Return the subject's entries with ``start <= record_date < end``."""
        ...


@dataclass(frozen=True)
class ScoredSubject:
    subject: SubjectSnapshot
    score: int
    days_remaining: float
    effective_periods_remaining: float
    display_tier: SubjectPriority | None = None


@dataclass(frozen=True)
class QuotaCandidates:
    remaining: int
    affordable: int
    deadline_pace: int

    @property
    def units_required(self) -> int:
        # never more than what is left, never less than the deadline pace
        return min(self.remaining, max(self.affordable, self.deadline_pace))


@dataclass(frozen=True)
class ProgressReconciliation:
    units_required: int
    units_logged: int

    @property
    def is_completed(self) -> bool:
        return self.units_logged >= self.units_required

    @property
    def progress_percentage(self) -> int:
        if self.units_required <= 0:
            return 100
        return min(100, math.floor(self.units_logged / self.units_required * 100))

    @property
    def status(self) -> QuotaStatus:
        if self.is_completed:
            return "completed"
        if self.units_logged > 0:
            return "in_progress"
        return "not_started"


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def period_bounds(today: date, period: Period) -> tuple[date, date]:
    """Half-open ``[start, end)`` range of the period containing ``today``.

    Weeks start on Monday.
    """
    if period == "day":
        return today, today + timedelta(days=1)
    week_start = today - timedelta(days=today.weekday())
    return week_start, week_start + timedelta(days=7)


def days_until(target: date | None, today: date) -> float:
    if target is None:
        return UNBOUNDED
    return (target - today).days


def resolve_effective_periods(
    exam_date: date | None, buffer_days: int, today: date, period: Period
) -> float:
    """Whole days or weeks left before the buffered target date, never below 1.

    Returns ``UNBOUNDED`` when there is no exam date.
    """
    if exam_date is None:
        return UNBOUNDED
    target_date = exam_date - timedelta(days=buffer_days)
    days_left = (target_date - today).days
    if period == "day":
        return max(1, days_left)
    return max(1, days_left // 7)


def _deadline_points(days_remaining: float) -> int:
    for max_days, points in DEADLINE_SCORE_BREAKPOINTS:
        if days_remaining <= max_days:
            return points
    return 0


def _progress_bonus(completion_percentage: float) -> int:
    for upper_bound, points in PROGRESS_BONUS_BREAKPOINTS:
        if completion_percentage < upper_bound:
            return points
    return 0


def score_subject(subject: SubjectSnapshot, today: date) -> int:
    """Urgency score from exam proximity, manual priority, progress and importance."""
    score = _deadline_points(days_until(subject.exam_date, today))
    score += MANUAL_PRIORITY_BONUS.get(subject.priority, 0)
    score += _progress_bonus(subject.completion_percentage)
    score += IMPORTANCE_BONUS.get(subject.importance, 0)
    return score


def score_subjects(
    subjects: Iterable[SubjectSnapshot],
    settings: StudySettings,
    today: date,
    period: Period,
) -> list[ScoredSubject]:
    scored: list[ScoredSubject] = []
    for subject in subjects:
        # Finished subjects are never selected
        if subject.is_complete:
            continue
        buffer_days = (
            subject.buffer_days
            if subject.buffer_days is not None
            else settings.exam_buffer_days
        )
        scored.append(
            ScoredSubject(
                subject=subject,
                score=score_subject(subject, today),
                days_remaining=days_until(subject.exam_date, today),
                effective_periods_remaining=resolve_effective_periods(
                    subject.exam_date, buffer_days, today, period
                ),
            )
        )
    return scored


def select_subjects(
    scored: Sequence[ScoredSubject], max_concurrent: int
) -> list[ScoredSubject]:
    """Top ``max_concurrent`` subjects by score; ties keep input order."""
    ranked = sorted(scored, key=lambda item: -item.score)
    return ranked[:max_concurrent]


def assign_display_tiers(selected: Sequence[ScoredSubject]) -> list[ScoredSubject]:
    """Derive high/medium/low tiers relative to the top selected score.

    ``selected`` must already be ranked by ``select_subjects``. The first
    subject is ``high``, subjects reaching half the top score are ``medium``,
    the rest ``low``. The stored subject priority is left untouched.
    """
    if not selected:
        return []
    threshold = selected[0].score * MEDIUM_TIER_SCORE_RATIO
    tiered: list[ScoredSubject] = []
    for index, item in enumerate(selected):
        if index == 0:
            tier = SubjectPriority.HIGH
        elif item.score >= threshold:
            tier = SubjectPriority.MEDIUM
        else:
            tier = SubjectPriority.LOW
        tiered.append(replace(item, display_tier=tier))
    return tiered


def _tier_weights(selected: Sequence[ScoredSubject]) -> list[int]:
    return [
        TIER_WEIGHT[item.display_tier or item.subject.priority] for item in selected
    ]


def partition_budget(selected: Sequence[ScoredSubject]) -> list[float]:
    """Share of the period budget for each selected subject, summing to 1."""
    weights = _tier_weights(selected)
    total_weight = sum(weights)
    if total_weight <= 0:
        return [0.0 for _ in selected]
    return [weight / total_weight for weight in weights]


def allocate_minutes(
    selected: Sequence[ScoredSubject], budget_minutes: float
) -> list[float]:
    return [budget_minutes * fraction for fraction in partition_budget(selected)]


def compute_quota_candidates(
    remaining: int,
    allocated_minutes: float,
    average_unit_time: float,
    effective_periods: float,
) -> QuotaCandidates:
    # round first so 29.999999 minutes of float noise does not lose a unit
    affordable = max(0, math.floor(round(allocated_minutes / average_unit_time, 9)))
    if math.isinf(effective_periods):
        deadline_pace = 0
    else:
        deadline_pace = math.ceil(remaining / effective_periods)
    return QuotaCandidates(
        remaining=remaining,
        affordable=affordable,
        deadline_pace=deadline_pace,
    )


def reconcile_progress(
    entries: Iterable[ProgressEntry],
    period_start: date,
    period_end: date,
    units_required: int,
) -> ProgressReconciliation:
    logged = sum(
        entry.units_completed
        for entry in entries
        if period_start <= _as_date(entry.record_date) < period_end
    )
    return ProgressReconciliation(units_required=units_required, units_logged=logged)


def _fetch_entries(
    progress_lookup: ProgressLookup, subject_id: int, start: date, end: date
) -> list[ProgressEntry]:
    """Read the subject's entries; a failed read counts as no progress."""
    try:
        return list(progress_lookup.get_records_in_range(subject_id, start, end))
    except Exception as e:
        logger.warning(
            f"Progress lookup failed for subject {subject_id} ({start} - {end}): {e}"
        )
        return []


def distribute_weekly_units(
    total_units: int, today: date, study_days_per_week: int
) -> dict[date, int]:
    """Spread the weekly total over the study days left in the week.

    Every day of the current week is present in the result. Days before
    ``today`` get 0; the remaining study days get the ceiling share and the
    last one takes whatever is left.
    """
    week_start, week_end = period_bounds(today, "week")
    distribution = {week_start + timedelta(days=offset): 0 for offset in range(7)}

    study_days = min((week_end - today).days, study_days_per_week)
    if total_units <= 0 or study_days <= 0:
        return distribution

    per_day = math.ceil(total_units / study_days)
    left = total_units
    for offset in range(study_days):
        share = min(per_day, left)
        distribution[today + timedelta(days=offset)] = share
        left -= share
    return distribution


def _build_quota_items(
    subjects: Sequence[SubjectSnapshot],
    settings: StudySettings,
    progress_lookup: ProgressLookup,
    today: date,
    period: Period,
) -> tuple[date, date, list[QuotaItem]]:
    period_start, period_end = period_bounds(today, period)
    budget_minutes = (
        settings.daily_study_minutes if period == "day" else settings.weekly_study_minutes
    )

    scored = score_subjects(subjects, settings, today, period)
    selected = assign_display_tiers(
        select_subjects(scored, settings.max_concurrent_subjects)
    )
    allocations = allocate_minutes(selected, budget_minutes)

    items: list[QuotaItem] = []
    for entry, allocated in zip(selected, allocations):
        subject = entry.subject
        candidates = compute_quota_candidates(
            subject.remaining_units,
            allocated,
            settings.average_unit_time,
            entry.effective_periods_remaining,
        )
        units_required = candidates.units_required
        reconciliation = reconcile_progress(
            _fetch_entries(progress_lookup, subject.id, period_start, period_end),
            period_start,
            period_end,
            units_required,
        )
        items.append(
            QuotaItem(
                subject_id=subject.id,
                subject_name=subject.name,
                units_required=units_required,
                estimated_minutes=units_required * settings.average_unit_time,
                priority_tier=entry.display_tier,
                units_completed_this_period=reconciliation.units_logged,
                progress_percentage=reconciliation.progress_percentage,
                status=reconciliation.status,
                is_completed=reconciliation.is_completed,
                score=entry.score,
                allocated_minutes=allocated,
                exam_date=subject.exam_date,
                report_deadline=subject.report_deadline,
                days_remaining=(
                    None if math.isinf(entry.days_remaining) else int(entry.days_remaining)
                ),
                effective_periods_remaining=(
                    None
                    if math.isinf(entry.effective_periods_remaining)
                    else int(entry.effective_periods_remaining)
                ),
            )
        )

    logger.debug(
        f"Computed {period} quota for {period_start}: {len(items)} of "
        f"{len(scored)} incomplete subjects selected"
    )
    return period_start, period_end, items


def _period_totals(items: Sequence[QuotaItem]) -> dict[str, Any]:
    return {
        "total_units": sum(item.units_required for item in items),
        "total_minutes": sum(item.estimated_minutes for item in items),
        "completed_units": sum(item.units_completed_this_period for item in items),
        # vacuously complete when nothing is selected
        "is_completed": all(item.is_completed for item in items),
        "active_subjects_count": len(items),
    }


def compute_daily_quota(
    subjects: Sequence[SubjectSnapshot],
    settings: StudySettings,
    progress_lookup: ProgressLookup,
    now: datetime,
) -> DailyQuota:
    """Quota for the calendar day containing ``now``."""
    validate_study_settings(settings)
    today = _as_date(now)
    period_start, period_end, items = _build_quota_items(
        subjects, settings, progress_lookup, today, "day"
    )
    return DailyQuota(
        period_start=period_start,
        period_end=period_end,
        items=items,
        **_period_totals(items),
    )


def compute_weekly_quota(
    subjects: Sequence[SubjectSnapshot],
    settings: StudySettings,
    progress_lookup: ProgressLookup,
    now: datetime,
) -> WeeklyQuota:
    """Quota for the Monday-based week containing ``now``."""
    validate_study_settings(settings)
    today = _as_date(now)
    period_start, period_end, items = _build_quota_items(
        subjects, settings, progress_lookup, today, "week"
    )
    totals = _period_totals(items)
    return WeeklyQuota(
        period_start=period_start,
        period_end=period_end,
        items=items,
        daily_distribution=distribute_weekly_units(
            totals["total_units"], today, settings.study_days_per_week
        ),
        **totals,
    )
