from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String

from studyquota.db.base import Base


class StudySettingsRecord(Base):
    __tablename__ = "study_settings"

    id = Column(Integer, primary_key=True, index=True)
    max_concurrent_subjects = Column(Integer, nullable=False, default=3)
    daily_study_hours = Column(Float, nullable=False, default=2)
    study_days_per_week = Column(Integer, nullable=False, default=5)
    average_unit_time = Column(Float, nullable=False, default=3)  # minutes per unit
    exam_buffer_days = Column(Integer, nullable=False, default=7)
    timezone = Column(String(64), nullable=False, default="UTC")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
