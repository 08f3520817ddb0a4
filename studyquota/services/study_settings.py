"""Learner study settings as consumed by the quota engine.

The engine never reads the settings table or the application config itself.
Callers build an immutable ``StudySettings`` value (from configuration
defaults, from the stored record, or from explicit overrides) and pass it in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from studyquota.core.config import get_settings
from studyquota.models.study_settings import StudySettingsRecord

logger = logging.getLogger(__name__)


class InvalidStudySettingsError(ValueError):
    """Raised when settings cannot drive a quota computation."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


@dataclass(frozen=True)
class StudySettings:
    max_concurrent_subjects: int = 3
    daily_study_minutes: float = 120
    study_days_per_week: int = 5
    average_unit_time: float = 3  # minutes per unit
    exam_buffer_days: int = 7

    @property
    def weekly_study_minutes(self) -> float:
        return self.daily_study_minutes * self.study_days_per_week

    @classmethod
    def from_hours(cls, daily_study_hours: float, **kwargs: Any) -> StudySettings:
        return cls(daily_study_minutes=daily_study_hours * 60, **kwargs)


def default_study_settings() -> StudySettings:
    """Build a fresh settings value from the configured defaults."""
    config = get_settings()
    return StudySettings.from_hours(
        config.default_daily_study_hours,
        max_concurrent_subjects=config.default_max_concurrent_subjects,
        study_days_per_week=config.default_study_days_per_week,
        average_unit_time=config.default_average_unit_time,
        exam_buffer_days=config.default_exam_buffer_days,
    )


def apply_overrides(base: StudySettings, **overrides: Any) -> StudySettings:
    """Return a copy of ``base`` with ``overrides`` applied.

    ``None`` values are ignored so partial update payloads can be passed
    straight through. Unknown keys are rejected.
    """
    known = {f.name for f in fields(StudySettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise InvalidStudySettingsError([f"Unknown setting: {name}" for name in unknown])
    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(base, **changes)


def validate_study_settings(settings: StudySettings) -> StudySettings:
    problems: list[str] = []
    if settings.max_concurrent_subjects < 1:
        problems.append("max_concurrent_subjects must be at least 1")
    if settings.average_unit_time <= 0:
        problems.append("average_unit_time must be greater than 0")
    if not 1 <= settings.study_days_per_week <= 7:
        problems.append("study_days_per_week must be between 1 and 7")
    if settings.daily_study_minutes < 0:
        problems.append("daily_study_minutes cannot be negative")
    if settings.exam_buffer_days < 0:
        problems.append("exam_buffer_days cannot be negative")
    if problems:
        raise InvalidStudySettingsError(problems)
    return settings


def study_settings_from_record(record: StudySettingsRecord) -> StudySettings:
    return StudySettings.from_hours(
        record.daily_study_hours,
        max_concurrent_subjects=record.max_concurrent_subjects,
        study_days_per_week=record.study_days_per_week,
        average_unit_time=record.average_unit_time,
        exam_buffer_days=record.exam_buffer_days,
    )


def learner_now(record: StudySettingsRecord, at: datetime | None = None) -> datetime:
    """Current time in the learner's timezone, or ``at`` converted to it.

    Naive ``at`` values are taken as already local to the learner.
    """
    tz = ZoneInfo(record.timezone or "UTC")
    if at is None:
        return datetime.now(tz)
    if at.tzinfo is None:
        return at.replace(tzinfo=tz)
    return at.astimezone(tz)


def get_or_create_settings_record(db: Session) -> StudySettingsRecord:
    """Return the learner's settings row, seeding it from config on first use."""
    record = db.query(StudySettingsRecord).order_by(StudySettingsRecord.id).first()
    if record:
        return record

    defaults = default_study_settings()
    record = StudySettingsRecord(
        max_concurrent_subjects=defaults.max_concurrent_subjects,
        daily_study_hours=defaults.daily_study_minutes / 60,
        study_days_per_week=defaults.study_days_per_week,
        average_unit_time=defaults.average_unit_time,
        exam_buffer_days=defaults.exam_buffer_days,
        timezone=get_settings().default_timezone,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Seeded study settings from configuration defaults")
    return record
