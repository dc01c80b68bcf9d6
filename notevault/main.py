from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from redis import Redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from notevault.core.config import settings
from notevault.core.db import SessionLocal, engine
from notevault.core.logging import configure_logging
from notevault.tasks.capture_tasks import enqueue_capture

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("notevault")

app = FastAPI(title=settings.APP_NAME)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _check_database() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def _check_redis() -> bool:
    try:
        r = Redis.from_url(settings.REDIS_URL, socket_connect_timeout=1, socket_timeout=1)
        return bool(r.ping())
    except Exception:
        return False


@app.get("/health")
def health() -> dict[str, Any]:
    deps = {
        "database": _check_database(),
        "redis": _check_redis(),
    }
    return {"ok": all(deps.values()), "deps": deps, "app": settings.APP_NAME}


@app.post("/captures/{capture_id}/process")
def process_capture_endpoint(capture_id: str, db: Session = Depends(get_db)) -> dict:
    out = enqueue_capture(db, capture_id=capture_id)
    if out.get("reason") == "not_found":
        raise HTTPException(status_code=404, detail="Capture not found")
    log.info("Capture %s dispatch: %s", capture_id, out.get("status") or out.get("reason"))
    return out
