from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from studyquota.db.session import get_db
from studyquota.models.subject import Subject
from studyquota.schemas.quota import DailyQuota, WeeklyQuota
from studyquota.services.progress import SqlProgressLookup
from studyquota.services.quota_engine import (
    SubjectSnapshot,
    compute_daily_quota,
    compute_weekly_quota,
)
from studyquota.services.study_settings import (
    InvalidStudySettingsError,
    get_or_create_settings_record,
    learner_now,
    study_settings_from_record,
)

router = APIRouter()

AT_DESCRIPTION = "Compute as of this time instead of now (learner timezone if naive)"


def _load_inputs(db: Session, at: datetime | None):
    record = get_or_create_settings_record(db)
    subjects = [
        SubjectSnapshot.from_model(subject)
        for subject in db.query(Subject).order_by(Subject.id.asc()).all()
    ]
    return subjects, study_settings_from_record(record), learner_now(record, at)


def _invalid_settings(e: InvalidStudySettingsError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.problems
    )


@router.get("/daily", response_model=DailyQuota)
def daily_quota(
    at: datetime | None = Query(default=None, description=AT_DESCRIPTION),
    db: Session = Depends(get_db),
) -> DailyQuota:
    subjects, settings, now = _load_inputs(db, at)
    try:
        return compute_daily_quota(subjects, settings, SqlProgressLookup(db), now)
    except InvalidStudySettingsError as e:
        raise _invalid_settings(e) from e


@router.get("/weekly", response_model=WeeklyQuota)
def weekly_quota(
    at: datetime | None = Query(default=None, description=AT_DESCRIPTION),
    db: Session = Depends(get_db),
) -> WeeklyQuota:
    subjects, settings, now = _load_inputs(db, at)
    try:
        return compute_weekly_quota(subjects, settings, SqlProgressLookup(db), now)
    except InvalidStudySettingsError as e:
        raise _invalid_settings(e) from e
