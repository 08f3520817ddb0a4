from datetime import date, datetime

from pydantic import BaseModel, Field, validator

from studyquota.models.subject import SubjectImportance, SubjectPriority


class SubjectBase(BaseModel):
    name: str
    textbook_name: str | None = None
    total_units: int = Field(..., ge=1)
    completed_units: int = Field(default=0, ge=0)
    exam_date: date | None = None
    report_deadline: date | None = None
    buffer_days: int | None = Field(default=None, ge=0)
    priority: SubjectPriority = SubjectPriority.MEDIUM
    importance: SubjectImportance = SubjectImportance.MEDIUM

    @validator("completed_units")
    def completed_within_total(cls, v, values):
        total = values.get("total_units")
        if total is not None and v > total:
            raise ValueError("completed_units cannot exceed total_units")
        return v


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    name: str | None = None
    textbook_name: str | None = None
    total_units: int | None = Field(default=None, ge=1)
    completed_units: int | None = Field(default=None, ge=0)
    exam_date: date | None = None
    report_deadline: date | None = None
    buffer_days: int | None = Field(default=None, ge=0)
    priority: SubjectPriority | None = None
    importance: SubjectImportance | None = None


class SubjectInDBBase(SubjectBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SubjectPublic(SubjectInDBBase):
    pass
