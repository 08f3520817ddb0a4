import logging

from studyquota.db.base import Base
from studyquota.db.session import engine
from studyquota.models import ProgressRecord, StudySettingsRecord, Subject  # noqa: F401

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
