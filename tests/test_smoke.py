from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("CELERY_TASK_ALWAYS_EAGER", "1")
    monkeypatch.setenv("CELERY_BROKER_URL", "memory://")
    monkeypatch.setenv("CELERY_RESULT_BACKEND", "cache+memory://")

    from notevault.core.config import settings
    from notevault.core.db import engine
    from notevault.models.base import Base

    import notevault.main

    monkeypatch.setattr(settings, "CELERY_TASK_ALWAYS_EAGER", True)
    monkeypatch.setattr(settings, "CAPTURE_LOCK_ENABLED", False)

    Base.metadata.create_all(bind=engine)
    return TestClient(notevault.main.app)


def test_health_reports_dependencies(client: TestClient, monkeypatch):
    import notevault.main

    monkeypatch.setattr(notevault.main, "_check_redis", lambda: False)

    r = client.get("/health")

    assert r.status_code == 200
    data = r.json()
    assert data["deps"] == {"database": True, "redis": False}
    assert data["ok"] is False


def test_process_unknown_capture_is_404(client: TestClient):
    r = client.post("/captures/missing/process")
    assert r.status_code == 404


def test_process_skipped_capture(client: TestClient, tmp_path: Path):
    from notevault.core.db import SessionLocal
    from tests.utils_captures import seed_capture, seed_user

    with SessionLocal() as db:
        user = seed_user(db, vault_path=str(tmp_path))
        cid = seed_capture(db, user=user, skip_processing=True).id

    r = client.post(f"/captures/{cid}/process")

    assert r.status_code == 200
    assert r.json() == {"ok": True, "status": "skipped", "capture_id": cid}


def test_process_capture_through_api(client: TestClient, tmp_path: Path, monkeypatch):
    from notevault.core.db import SessionLocal
    from notevault.tasks import capture_tasks
    from tests.utils_captures import seed_capture, seed_user

    class Gen:
        def generate(self, *, prompt, max_tokens=1000, system=""):
            return "Title: From API\n\nSummary:\nShort.\n\nTags: api"

    monkeypatch.setattr(capture_tasks, "build_generator", lambda: Gen())

    with SessionLocal() as db:
        user = seed_user(db, vault_path=str(tmp_path))
        cid = seed_capture(db, user=user).id

    r = client.post(f"/captures/{cid}/process")

    assert r.status_code == 200
    assert r.json()["file_path"] == "Captures/From API.md"
    assert (tmp_path / "Captures" / "From API.md").exists()
