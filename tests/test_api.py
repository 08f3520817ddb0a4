import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studyquota.core.config import get_settings
from studyquota.db.base import Base
from studyquota.db.session import get_db
from studyquota.main import create_app

AT = "2026-10-21T09:00:00"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def client(engine):
    testing_session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_test_db():
        db = testing_session()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = _get_test_db
    return TestClient(app)


def _create_subject(client: TestClient, **overrides) -> dict:
    payload = {
        "name": "Linear Algebra",
        "total_units": 100,
        "exam_date": "2026-11-20",
        "buffer_days": 0,
    }
    payload.update(overrides)
    response = client.post("/subjects/", json=payload)
    assert response.status_code == 201
    return response.json()


def test_settings_seeded_from_defaults(client: TestClient):
    response = client.get("/settings/")

    assert response.status_code == 200
    body = response.json()
    assert body["max_concurrent_subjects"] == 3
    assert body["daily_study_hours"] == 2
    assert body["study_days_per_week"] == 5
    assert body["average_unit_time"] == 3
    assert body["exam_buffer_days"] == 7
    assert body["timezone"] == "UTC"


def test_settings_partial_update(client: TestClient):
    response = client.put("/settings/", json={"daily_study_hours": 1, "timezone": "Asia/Tokyo"})

    assert response.status_code == 200
    body = response.json()
    assert body["daily_study_hours"] == 1
    assert body["timezone"] == "Asia/Tokyo"
    assert body["max_concurrent_subjects"] == 3


def test_settings_seeded_from_configuration(client: TestClient, monkeypatch: pytest.MonkeyPatch):
    get_settings.cache_clear()
    monkeypatch.setenv("DEFAULT_DAILY_STUDY_HOURS", "1.5")
    monkeypatch.setenv("DEFAULT_EXAM_BUFFER_DAYS", "3")
    try:
        body = client.get("/settings/").json()
    finally:
        get_settings.cache_clear()

    assert body["daily_study_hours"] == 1.5
    assert body["exam_buffer_days"] == 3


def test_rejected_settings_update_leaves_row_untouched(client: TestClient):
    client.put("/settings/", json={"study_days_per_week": 6})

    response = client.put("/settings/", json={"study_days_per_week": 7, "average_unit_time": 0})
    assert response.status_code == 422

    body = client.get("/settings/").json()
    assert body["study_days_per_week"] == 6
    assert body["average_unit_time"] == 3


@pytest.mark.parametrize(
    "payload",
    [
        {"max_concurrent_subjects": 0},
        {"average_unit_time": 0},
        {"study_days_per_week": 8},
        {"timezone": "Mars/Olympus_Mons"},
    ],
)
def test_settings_reject_invalid_values(client: TestClient, payload: dict):
    response = client.put("/settings/", json=payload)
    assert response.status_code == 422


def test_subject_crud(client: TestClient):
    created = _create_subject(client)

    listed = client.get("/subjects/").json()
    assert [subject["id"] for subject in listed] == [created["id"]]

    updated = client.put(f"/subjects/{created['id']}", json={"completed_units": 40})
    assert updated.status_code == 200
    assert updated.json()["completed_units"] == 40

    assert client.delete(f"/subjects/{created['id']}").status_code == 204
    assert client.get(f"/subjects/{created['id']}").status_code == 404


def test_subject_completed_units_cannot_exceed_total(client: TestClient):
    response = client.post(
        "/subjects/", json={"name": "History", "total_units": 10, "completed_units": 11}
    )
    assert response.status_code == 422

    created = _create_subject(client, total_units=10)
    response = client.put(f"/subjects/{created['id']}", json={"completed_units": 11})
    assert response.status_code == 422


def test_subject_update_rejects_null_required_fields(client: TestClient):
    created = _create_subject(client, completed_units=5)

    for field in ("completed_units", "name", "total_units"):
        response = client.put(f"/subjects/{created['id']}", json={field: None})
        assert response.status_code == 422

    unchanged = client.get(f"/subjects/{created['id']}").json()
    assert unchanged["name"] == "Linear Algebra"
    assert unchanged["completed_units"] == 5


def test_subject_update_can_clear_exam_date(client: TestClient):
    created = _create_subject(client)

    response = client.put(f"/subjects/{created['id']}", json={"exam_date": None})

    assert response.status_code == 200
    assert response.json()["exam_date"] is None


def test_subjects_listed_by_exam_date(client: TestClient):
    _create_subject(client, name="No exam", exam_date=None)
    _create_subject(client, name="Later", exam_date="2026-12-01")
    _create_subject(client, name="Sooner", exam_date="2026-11-01")

    names = [subject["name"] for subject in client.get("/subjects/").json()]

    assert names == ["Sooner", "Later", "No exam"]


def test_progress_advances_subject(client: TestClient):
    subject = _create_subject(client, total_units=20, completed_units=15)

    response = client.post(
        "/progress/",
        json={"subject_id": subject["id"], "units_completed": 8, "record_date": "2026-10-21"},
    )

    assert response.status_code == 201
    assert response.json()["units_completed"] == 8
    refreshed = client.get(f"/subjects/{subject['id']}").json()
    assert refreshed["completed_units"] == 20


def test_progress_for_unknown_subject(client: TestClient):
    response = client.post("/progress/", json={"subject_id": 999, "units_completed": 1})
    assert response.status_code == 404


def test_progress_listing_filters_by_range(client: TestClient):
    subject = _create_subject(client)
    for day in ("2026-10-19", "2026-10-21", "2026-10-26"):
        client.post(
            "/progress/",
            json={"subject_id": subject["id"], "units_completed": 2, "record_date": day},
        )

    response = client.get(
        "/progress/",
        params={"subject_id": subject["id"], "start": "2026-10-19", "end": "2026-10-26"},
    )

    assert [record["record_date"] for record in response.json()] == [
        "2026-10-19",
        "2026-10-21",
    ]


def test_deleting_subject_removes_its_progress(client: TestClient):
    subject = _create_subject(client)
    client.post(
        "/progress/",
        json={"subject_id": subject["id"], "units_completed": 3, "record_date": "2026-10-21"},
    )

    client.delete(f"/subjects/{subject['id']}")

    assert client.get("/progress/").json() == []


def test_daily_quota_reflects_logged_progress(client: TestClient):
    subject = _create_subject(client)

    before = client.get("/quota/daily", params={"at": AT}).json()
    assert before["period_start"] == "2026-10-21"
    assert before["period_end"] == "2026-10-22"
    item = before["items"][0]
    # 120 daily minutes at 3 minutes per unit
    assert item["units_required"] == 40
    assert item["estimated_minutes"] == 120
    assert item["priority_tier"] == "high"
    assert item["status"] == "not_started"

    client.post(
        "/progress/",
        json={"subject_id": subject["id"], "units_completed": 10, "record_date": "2026-10-21"},
    )

    after = client.get("/quota/daily", params={"at": AT}).json()
    item = after["items"][0]
    assert item["units_completed_this_period"] == 10
    assert item["progress_percentage"] == 25
    assert item["status"] == "in_progress"
    assert after["is_completed"] is False


def test_weekly_quota_distribution(client: TestClient):
    _create_subject(client, completed_units=10)

    body = client.get("/quota/weekly", params={"at": AT}).json()

    assert body["period"] == "week"
    assert body["period_start"] == "2026-10-19"
    assert body["total_units"] == 90
    assert body["daily_distribution"]["2026-10-19"] == 0
    assert body["daily_distribution"]["2026-10-21"] == 18
    assert sum(body["daily_distribution"].values()) == 90


def test_quota_without_subjects_is_complete(client: TestClient):
    body = client.get("/quota/daily", params={"at": AT}).json()

    assert body["items"] == []
    assert body["total_units"] == 0
    assert body["is_completed"] is True
