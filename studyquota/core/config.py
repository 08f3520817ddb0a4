from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )
    database_url: str = Field(default="sqlite:///./studyquota.db")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)

    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:3001",
            "http://127.0.0.1:3001",
        ]
    )

    # Seed values for the learner's study settings row
    default_max_concurrent_subjects: int = Field(default=3, ge=1)
    default_daily_study_hours: float = Field(default=2, ge=0, le=24)
    default_study_days_per_week: int = Field(default=5, ge=1, le=7)
    default_average_unit_time: float = Field(default=3, gt=0)
    default_exam_buffer_days: int = Field(default=7, ge=0)
    default_timezone: str = Field(default="UTC")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
