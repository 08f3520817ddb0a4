from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from studyquota.db.base import Base


class ProgressRecord(Base):
    """One entry of the append-only reading log."""

    __tablename__ = "progress_records"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    units_completed = Column(Integer, nullable=False)
    record_date = Column(Date, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=True)
    memo = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    subject = relationship("Subject", back_populates="progress_records")
