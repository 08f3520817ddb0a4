from datetime import date, datetime

from pydantic import BaseModel, Field


class ProgressCreate(BaseModel):
    subject_id: int
    units_completed: int = Field(..., ge=1)
    record_date: date | None = None  # defaults to today in the learner's timezone
    duration_minutes: int | None = Field(default=None, ge=0)
    memo: str | None = Field(default=None, max_length=255)


class ProgressPublic(BaseModel):
    id: int
    subject_id: int
    units_completed: int
    record_date: date
    duration_minutes: int | None = None
    memo: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True
