import pytest

from studyquota import start
from studyquota.core.config import get_settings


@pytest.fixture()
def fresh_config(monkeypatch: pytest.MonkeyPatch):
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_start_creates_tables_then_serves(fresh_config: pytest.MonkeyPatch):
    calls = []
    fresh_config.setenv("HOST", "0.0.0.0")
    fresh_config.setenv("PORT", "9000")
    fresh_config.setenv("ENVIRONMENT", "production")
    fresh_config.setattr(start, "init_db", lambda: calls.append("init_db"))
    fresh_config.setattr(
        start.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs))
    )

    start.main()

    assert calls == [
        "init_db",
        ("studyquota.main:app", {"host": "0.0.0.0", "port": 9000, "reload": False}),
    ]
