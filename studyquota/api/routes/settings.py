from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from studyquota.db.session import get_db
from studyquota.schemas.study_settings import StudySettingsPublic, StudySettingsUpdate
from studyquota.services.study_settings import (
    InvalidStudySettingsError,
    apply_overrides,
    get_or_create_settings_record,
    study_settings_from_record,
    validate_study_settings,
)

router = APIRouter()


@router.get("/", response_model=StudySettingsPublic)
def read_settings(db: Session = Depends(get_db)) -> StudySettingsPublic:
    return get_or_create_settings_record(db)


@router.put("/", response_model=StudySettingsPublic)
def update_settings(
    payload: StudySettingsUpdate,
    db: Session = Depends(get_db),
) -> StudySettingsPublic:
    record = get_or_create_settings_record(db)
    data = payload.dict(exclude_unset=True, exclude_none=True)
    daily_study_hours = data.get("daily_study_hours")
    try:
        validate_study_settings(
            apply_overrides(
                study_settings_from_record(record),
                max_concurrent_subjects=data.get("max_concurrent_subjects"),
                daily_study_minutes=(
                    daily_study_hours * 60 if daily_study_hours is not None else None
                ),
                study_days_per_week=data.get("study_days_per_week"),
                average_unit_time=data.get("average_unit_time"),
                exam_buffer_days=data.get("exam_buffer_days"),
            )
        )
    except InvalidStudySettingsError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.problems
        ) from e

    # Only a validated update reaches the row
    for key, value in data.items():
        setattr(record, key, value)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record
