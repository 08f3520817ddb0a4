"""Startup script: create any missing tables, then serve the API."""

import logging

import uvicorn

from studyquota.core.config import get_settings
from studyquota.init_db import init_db


def main():
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    init_db()
    uvicorn.run(
        "studyquota.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
    )


if __name__ == "__main__":
    main()
