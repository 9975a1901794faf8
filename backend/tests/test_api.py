from __future__ import annotations
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from jobhub.api.deps import get_search_service
from jobhub.crawlers.base import CanonicalJob
from jobhub.main import app
from jobhub.services.search_service import SearchResult


class StubService:
    def __init__(self, result: SearchResult):
        self.result = result
        self.calls: list[tuple] = []

    async def search_jobs(self, query, location=None, ip_detected_city=None):
        self.calls.append((query, location, ip_detected_city))
        return self.result


def _client(service: StubService) -> TestClient:
    app.dependency_overrides[get_search_service] = lambda: service
    return TestClient(app)


def test_health():
    assert TestClient(app).get("/health").json() == {"status": "ok"}


def test_search_endpoint_serializes_jobs():
    job = CanonicalJob(
        id="jsearch:1",
        title="Backend Engineer",
        employer_name="Acme",
        apply_url="https://acme.example/apply",
        posted_at=datetime(2026, 10, 1, 8, tzinfo=timezone.utc),
        city="Hyderabad",
        country="IN",
        min_salary=90000,
        max_salary=120000,
        highlights={"Qualifications": ("Python",)},
        source="jsearch",
    )
    service = StubService(SearchResult([job], "deep"))
    try:
        resp = _client(service).get("/api/v1/jobs/search", params={"q": "backend", "location": "Hyderabad", "ip_city": "Pune"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    body = resp.json()
    assert body["source_quality"] == "deep"
    assert body["jobs"][0]["location"] == "Hyderabad, IN"
    assert body["jobs"][0]["salary"] == "$90k - $120k"
    assert body["jobs"][0]["highlights"] == {"Qualifications": ["Python"]}
    assert service.calls == [("backend", "Hyderabad", "Pune")]


def test_search_endpoint_empty_result_is_not_an_error():
    service = StubService(SearchResult())
    try:
        resp = _client(service).get("/api/v1/jobs/search", params={"q": "obscure query"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {"jobs": [], "source_quality": None}


def test_app_starts_when_warehouse_database_is_unreachable(monkeypatch, caplog):
    from sqlalchemy import create_engine

    from jobhub import main
    from jobhub.db import init_db
    from jobhub.services.search_service import JobSearchService

    monkeypatch.setattr(main.settings, "warehouse_url", "")
    monkeypatch.setattr(init_db, "engine", create_engine("sqlite+pysqlite:////nonexistent-jobhub-dir/warehouse.db"))

    with TestClient(app) as client:
        resp = client.get("/health")
        service = app.state.search_service

    assert resp.json() == {"status": "ok"}
    assert isinstance(service, JobSearchService)
    assert "warehouse database unavailable" in caplog.text


def test_try_init_db_reports_failure(monkeypatch):
    from sqlalchemy import create_engine

    from jobhub.db import init_db

    monkeypatch.setattr(init_db, "engine", create_engine("sqlite+pysqlite:////nonexistent-jobhub-dir/warehouse.db"))

    assert init_db.try_init_db() is False


def test_database_module_exposes_only_engine_and_session():
    from jobhub.db import database

    assert not hasattr(database, "get_db")
    assert database.SessionLocal.kw["bind"] is database.engine
