from datetime import date, datetime
from enum import Enum as PyEnum

from sqlalchemy import Date, DateTime, Enum as SQLEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studyquota.db.base import Base


class SubjectPriority(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SubjectImportance(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    textbook_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_units: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exam_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    report_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Overrides StudySettings.exam_buffer_days when set
    buffer_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    priority: Mapped[SubjectPriority] = mapped_column(
        SQLEnum(SubjectPriority), nullable=False, default=SubjectPriority.MEDIUM
    )
    importance: Mapped[SubjectImportance] = mapped_column(
        SQLEnum(SubjectImportance), nullable=False, default=SubjectImportance.MEDIUM
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    progress_records = relationship(
        "ProgressRecord", back_populates="subject", cascade="all, delete-orphan"
    )
