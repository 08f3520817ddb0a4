from fastapi import APIRouter

from studyquota.api.routes import (
    progress,
    quota,
    settings,
    subjects,
)


api_router = APIRouter()
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(quota.router, prefix="/quota", tags=["quota"])
