from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from studyquota.db.session import get_db
from studyquota.models.subject import Subject
from studyquota.schemas.progress import ProgressCreate, ProgressPublic
from studyquota.services.progress import list_progress_records, record_progress
from studyquota.services.study_settings import get_or_create_settings_record, learner_now

router = APIRouter()


@router.get("/", response_model=list[ProgressPublic])
def list_progress(
    subject_id: int | None = Query(default=None),
    start: date | None = Query(default=None, description="Inclusive"),
    end: date | None = Query(default=None, description="Exclusive"),
    db: Session = Depends(get_db),
) -> list[ProgressPublic]:
    return list_progress_records(db, subject_id=subject_id, start=start, end=end)


@router.post("/", response_model=ProgressPublic, status_code=status.HTTP_201_CREATED)
def create_progress(
    payload: ProgressCreate,
    db: Session = Depends(get_db),
) -> ProgressPublic:
    subject = db.query(Subject).filter(Subject.id == payload.subject_id).first()
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found"
        )
    today = learner_now(get_or_create_settings_record(db)).date()
    return record_progress(db, subject, payload, today)
