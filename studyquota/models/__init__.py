from studyquota.models.subject import Subject
from studyquota.models.progress_record import ProgressRecord
from studyquota.models.study_settings import StudySettingsRecord

__all__ = [
    "Subject",
    "ProgressRecord",
    "StudySettingsRecord",
]
