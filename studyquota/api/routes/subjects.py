from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from studyquota.db.session import get_db
from studyquota.models.subject import Subject
from studyquota.schemas.subject import SubjectCreate, SubjectPublic, SubjectUpdate

router = APIRouter()

# exam_date, report_deadline, buffer_days and textbook_name may be cleared with null
NON_NULLABLE_FIELDS = ("name", "total_units", "completed_units", "priority", "importance")


def _get_subject_or_404(db: Session, subject_id: int) -> Subject:
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found"
        )
    return subject


@router.get("/", response_model=list[SubjectPublic])
def list_subjects(db: Session = Depends(get_db)) -> list[SubjectPublic]:
    return (
        db.query(Subject)
        .order_by(Subject.exam_date.asc().nulls_last(), Subject.name.asc())
        .all()
    )


@router.get("/{subject_id}", response_model=SubjectPublic)
def get_subject(subject_id: int, db: Session = Depends(get_db)) -> SubjectPublic:
    return _get_subject_or_404(db, subject_id)


@router.post("/", response_model=SubjectPublic, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
) -> SubjectPublic:
    subject = Subject(**payload.dict())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.put("/{subject_id}", response_model=SubjectPublic)
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
) -> SubjectPublic:
    subject = _get_subject_or_404(db, subject_id)
    data = payload.dict(exclude_unset=True)
    nulled = sorted(key for key in NON_NULLABLE_FIELDS if key in data and data[key] is None)
    if nulled:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[f"{key} cannot be null" for key in nulled],
        )
    total_units = data.get("total_units", subject.total_units)
    completed_units = data.get("completed_units", subject.completed_units)
    if completed_units > total_units:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="completed_units cannot exceed total_units",
        )
    for key, value in data.items():
        setattr(subject, key, value)
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(subject_id: int, db: Session = Depends(get_db)) -> None:
    subject = _get_subject_or_404(db, subject_id)
    db.delete(subject)
    db.commit()
