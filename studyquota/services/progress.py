from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from studyquota.models.progress_record import ProgressRecord
from studyquota.models.subject import Subject
from studyquota.schemas.progress import ProgressCreate
from studyquota.services.quota_engine import ProgressEntry

logger = logging.getLogger(__name__)


class SqlProgressLookup:
    """Progress lookup for the quota engine backed by the progress_records table."""

    def __init__(self, db: Session):
        self.db = db

    def get_records_in_range(
        self, subject_id: int, start: date, end: date
    ) -> list[ProgressEntry]:
        records = list_progress_records(self.db, subject_id=subject_id, start=start, end=end)
        return [
            ProgressEntry(
                subject_id=record.subject_id,
                units_completed=record.units_completed,
                record_date=record.record_date,
                duration_minutes=record.duration_minutes,
            )
            for record in records
        ]


def list_progress_records(
    db: Session,
    subject_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[ProgressRecord]:
    """Records ordered oldest first; ``start`` is inclusive and ``end`` exclusive."""
    query = db.query(ProgressRecord)
    if subject_id is not None:
        query = query.filter(ProgressRecord.subject_id == subject_id)
    if start is not None:
        query = query.filter(ProgressRecord.record_date >= start)
    if end is not None:
        query = query.filter(ProgressRecord.record_date < end)
    return query.order_by(ProgressRecord.record_date.asc(), ProgressRecord.id.asc()).all()


def record_progress(
    db: Session, subject: Subject, payload: ProgressCreate, today: date
) -> ProgressRecord:
    """Append a progress entry and advance the subject's completed units.

    The subject's counter never passes ``total_units``; the entry itself keeps
    the units as logged.
    """
    record = ProgressRecord(
        subject_id=subject.id,
        units_completed=payload.units_completed,
        record_date=payload.record_date or today,
        duration_minutes=payload.duration_minutes,
        memo=payload.memo,
    )
    advanced = (subject.completed_units or 0) + payload.units_completed
    if advanced > subject.total_units:
        logger.info(
            f"Subject {subject.id} progress clamped at {subject.total_units} units "
            f"(logged {payload.units_completed})"
        )
        advanced = subject.total_units
    subject.completed_units = advanced

    db.add(record)
    db.add(subject)
    db.commit()
    db.refresh(record)
    return record
