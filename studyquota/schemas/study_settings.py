from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, validator


def _check_timezone(v: str | None) -> str | None:
    if v is None:
        return v
    try:
        ZoneInfo(v)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {v}") from e
    return v


class StudySettingsBase(BaseModel):
    max_concurrent_subjects: int = Field(default=3, ge=1)
    daily_study_hours: float = Field(default=2, ge=0, le=24)
    study_days_per_week: int = Field(default=5, ge=1, le=7)
    average_unit_time: float = Field(default=3, gt=0, description="Minutes per unit")
    exam_buffer_days: int = Field(default=7, ge=0)
    timezone: str = "UTC"

    @validator("timezone")
    def validate_timezone(cls, v):
        return _check_timezone(v)


class StudySettingsUpdate(BaseModel):
    max_concurrent_subjects: int | None = Field(default=None, ge=1)
    daily_study_hours: float | None = Field(default=None, ge=0, le=24)
    study_days_per_week: int | None = Field(default=None, ge=1, le=7)
    average_unit_time: float | None = Field(default=None, gt=0)
    exam_buffer_days: int | None = Field(default=None, ge=0)
    timezone: str | None = None

    @validator("timezone")
    def validate_timezone(cls, v):
        return _check_timezone(v)


class StudySettingsPublic(StudySettingsBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
